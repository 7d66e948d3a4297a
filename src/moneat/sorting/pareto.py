"""
Pareto Dominance Module

This module implements the Pareto dominance routines shared by the q-procedures
and the algorithms. All objectives are minimized.

Functions:
    dominance_test:      Compare two fitness vectors
    sort_into_fronts:    Partition fitness vectors into non-dominated fronts
    nondominated_subset: Non-dominated members of a list of fitness elements
"""

from typing import Sequence, TypeVar

from moneat.genotype.fitness_element import FitnessElement

E = TypeVar('E', bound=FitnessElement)

def dominance_test(a: Sequence[float], b: Sequence[float], start_index: int = 0) -> int:
    """
    Test two fitness vectors for Pareto dominance.

    Parameters:
        a:           First vector
        b:           Second vector
        start_index: First objective to compare; leading objectives are ignored

    Returns:
        -1 if 'a' dominates 'b', 1 if 'b' dominates 'a', 0 otherwise
    """
    a_better = False
    b_better = False

    for i in range(start_index, len(a)):
        if a[i] < b[i]:
            a_better = True
        elif a[i] > b[i]:
            b_better = True

        if a_better and b_better:
            return 0

    if a_better == b_better:
        return 0
    return -1 if a_better else 1

def sort_into_fronts(vectors: Sequence[Sequence[float]]) -> list[list[int]]:
    """
    Sort fitness vectors into non-dominated fronts (Deb et al., NSGA-II).

    Parameters:
        vectors: Fitness vectors

    Returns:
        Fronts, best first; each front lists indices into 'vectors' in ascending order
    """
    n = len(vectors)
    dominated_by = [0] * n
    dominates    = [[] for _ in range(n)]

    for i in range(n - 1):
        for j in range(i + 1, n):
            result = dominance_test(vectors[i], vectors[j])
            if result == 0:
                continue

            dominator, dominated = (i, j) if result == -1 else (j, i)
            dominates[dominator].append(dominated)
            dominated_by[dominated] += 1

    fronts    = []
    remaining = list(range(n))
    while remaining:
        front     = [i for i in remaining if dominated_by[i] == 0]
        remaining = [i for i in remaining if dominated_by[i] != 0]

        for i in front:
            for j in dominates[i]:
                dominated_by[j] -= 1

        fronts.append(front)

    return fronts

def nondominated_subset(elements: Sequence[E], start_index: int = 0) -> list[E]:
    """
    Return the non-dominated elements of a list, in their original order.

    Elements without a fitness vector count as dominated. Duplicated fitness
    vectors do not dominate each other, so all copies are kept.

    Parameters:
        elements:    Fitness elements with equally long fitness vectors
        start_index: First objective to compare

    Returns:
        The non-dominated elements
    """
    if not elements:
        return []

    dominated = [element.fitness is None for element in elements]

    for i in range(len(elements)):
        if dominated[i]:
            continue
        for j in range(i + 1, len(elements)):
            if dominated[j]:
                continue

            result = dominance_test(elements[i].fitness, elements[j].fitness, start_index)
            if result == 1:
                dominated[i] = True
                break
            if result == -1:
                dominated[j] = True

    return [element for element, is_dominated in zip(elements, dominated) if not is_dominated]
