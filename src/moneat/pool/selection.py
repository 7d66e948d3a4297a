"""
Selection Module

This module implements the index-sampling routines used to pick parents,
survivors and genes. Distributions handled here are cumulative "from the back":
entry i holds the probability of selecting any index >= i, so entry 0 is 1.0.

Functions:
    roulette_wheel:      Select one index from a (non-cumulative) probability vector
    select_indices:      Stochastic universal sampling over a cumulative distribution
    select_rank_indices: SUS over a linear rank distribution on an index range
    linear_distribution: Cumulative, linearly decreasing rank distribution
    equal_distribution:  Cumulative uniform distribution
"""

import random

def roulette_wheel(distribution: list[float]) -> int:
    """
    Select one index according to the given selection probabilities.

    Parameters:
        distribution: Selection probability of each index (summing to 1)

    Returns:
        The selected index, or -1 if the probabilities sum to less than the drawn value
    """
    value = random.random()

    for index in range(len(distribution) - 1, -1, -1):
        value -= distribution[index]
        if value <= 0.0:
            return index

    return -1

def select_indices(distribution: list[float], amount: int) -> list[int]:
    """
    Select several indices with stochastic universal sampling.

    A single random offset places 'amount' equally spaced pointers onto the
    cumulative distribution; indices may be selected more than once.

    Parameters:
        distribution: Cumulative distribution (see module docstring)
        amount:       Number of indices to select

    Returns:
        The selected indices, in order of selection
    """
    if amount <= 0 or not distribution:
        return []

    result    = []
    step_size = 1.0 / amount
    r         = random.random() * step_size

    i = 0
    while len(result) < amount:
        # Rounding may leave the last pointers slightly above distribution[0]
        index = max(len(distribution) - (i + 1), 0)

        while r <= distribution[index] or index == 0:
            result.append(index)
            if len(result) == amount:
                return result
            r += step_size
        i += 1

    return result

def select_rank_indices(min_index: int, max_index: int, amount: int, selection_pressure: float) -> list[int]:
    """
    Select indices from [min_index, max_index] with linear rank-based probabilities
    (lower index = better rank = more likely).

    Parameters:
        min_index:          Smallest selectable index
        max_index:          Largest selectable index
        amount:             Number of indices to select
        selection_pressure: In [0, 1]; 0 selects uniformly, 1 is the steepest ramp

    Returns:
        The selected indices
    """
    steps = max_index - min_index + 1
    return [index + min_index for index in select_indices(linear_distribution(steps, selection_pressure), amount)]

def linear_distribution(steps: int, selection_pressure: float, additive: bool = True) -> list[float]:
    """
    Create linearly decreasing selection probabilities.

    Parameters:
        steps:              Number of entries
        selection_pressure: In [0, 1]; slope of the ramp
        additive:           If True, return the cumulative distribution

    Returns:
        Selection probabilities, best (index 0) first
    """
    if steps <= 1:
        return [1.0] * steps

    s  = 1.0 + selection_pressure
    f1 = (2.0 - s) / steps
    f2 = (2.0 * (s - 1.0)) / (steps * (steps - 1))

    distribution = [f1 + f2 * (steps - (i + 1)) for i in range(steps)]

    if additive:
        _accumulate_from_back(distribution)

    return distribution

def equal_distribution(steps: int) -> list[float]:
    """Create the cumulative uniform distribution over 'steps' entries."""
    distribution = [1.0 / steps] * steps
    _accumulate_from_back(distribution)
    return distribution

def _accumulate_from_back(distribution: list[float]) -> None:
    total = 0.0
    for i in range(len(distribution) - 1, -1, -1):
        total          += distribution[i]
        distribution[i] = total
