"""
Q-Procedure Module

This module implements the framework shared by all q-procedures: algorithms
that turn a set of fitness vectors into a total order and a scalar quality
(q-value) per element.

Q-procedures form a chain: elements the primary procedure cannot tell apart
(equal scores) are re-ranked by the subordinate procedure 'next', whose scores
are squeezed into the gap between the tied block's neighbours.

Functions:
    equals_delta: Floating point equality within two units in the last place

Classes:
    QProcedure:               Abstract q-procedure (ranking driver and normalization)
    ReferenceBasedQProcedure: Abstract q-procedure measuring against a reference point
"""

import itertools
import math
from abc import ABC, abstractmethod
from typing import Sequence, TypeVar

import numpy as np

from moneat.genotype.fitness_element import FitnessElement

E = TypeVar('E', bound=FitnessElement)

def equals_delta(a: float, b: float) -> bool:
    return abs(a - b) < max(math.ulp(a), math.ulp(b)) * 2

class QProcedure(ABC):
    """
    Abstract q-procedure.

    Each instance owns a process-unique attribute ID under which it stores its
    scores on the fitness elements it sorts ('FitnessElement.attributes').

    Ranking ('sort'):
        - Iterative mode: contributions are computed over the unranked elements;
          elements with a non-zero contribution are ranked in this round (the
          previously ranked ones are raised by the round's largest contribution
          to keep them ahead) and removed; the rest is scored again in the next
          round. A round that ranks nothing ends the loop.
        - Non-iterative mode: a single round.
        - Runs of equal scores are re-ranked by 'next', if given.
    Only the head of a chain writes 'q_value' (normalized to [0, 1]) and 'rank'.

    Public Attributes:
        iterative:       Iterative or single-round ranking
        next:            Subordinate q-procedure (tie breaker), or None
        previous:        Superordinate q-procedure, or None for the head of the chain
        evolution_mode:  If False, fitness is never normalized (evaluation of results)
        norm_min_value:  Offset added to every normalized objective value

    Public Methods:
        sort(elements):                 Rank a list of fitness elements in place
        compute_value(matrix):          Quality of a whole set
        compute_contribution(matrix):   Per-element scores (higher is better)
        compute_set_value(elements):    'compute_value' of a list of fitness elements
        compute_set_contribution(elements): 'compute_contribution' of a list of fitness elements
        to_matrix(elements):            Fitness matrix, normalized if the procedure requires it
        normalize(matrix):              Per-objective min-max normalization ignoring NaN
    """

    # Relative margin kept between the score range of a tied block and its neighbours
    U = 0.5

    key       : int = -1
    name      : str = "QProcedure"
    name_short: str = "QP"

    # Whether fitness is min-max normalized before scoring during evolution
    normalize_during_evolution: bool = False

    _attribute_ids = itertools.count()

    def __init__(self, iterative: bool, next_procedure: 'QProcedure | None' = None):
        """
        Parameters:
            iterative:      Rank in rounds (see class docstring)
            next_procedure: Subordinate q-procedure breaking ties, or None
        """
        self.iterative     : bool                 = iterative
        self.next          : QProcedure | None    = next_procedure
        self.previous      : QProcedure | None    = None
        self.evolution_mode: bool                 = True
        self.norm_min_value: float                = 0.0

        self._attribute_id: int = next(QProcedure._attribute_ids)

        if self.next is not None:
            self.next.previous = self

    @property
    def attribute_id(self) -> int:
        return self._attribute_id

    @abstractmethod
    def compute_value(self, matrix: np.ndarray) -> float:
        """Quality of the set of fitness vectors in 'matrix' (one row per element)."""
        pass

    @abstractmethod
    def compute_contribution(self, matrix: np.ndarray) -> np.ndarray:
        """Score of every row of 'matrix'; higher is better, 0 means 'not ranked in this round'."""
        pass

    def compute_set_value(self, elements: Sequence[FitnessElement]) -> float:
        return self.compute_value(self.to_matrix(elements))

    def compute_set_contribution(self, elements: Sequence[FitnessElement]) -> np.ndarray:
        return self.compute_contribution(self.to_matrix(elements))

    # ==========================================================================
    # Ranking
    # ==========================================================================

    def sort(self, elements: list[E]) -> None:
        """
        Rank 'elements' in place, best first.

        At the head of a chain, the scores are normalized to [0, 1] and copied to
        'q_value'; 'rank' is set to the position in the sorted list.
        """
        self.sort_impl(elements)

        if self.previous is None and elements:
            self.normalize_attribute(elements, self._attribute_id, self._attribute_id, 0.0, 1.0)

            for rank, element in enumerate(elements):
                element.q_value = element.get_attribute(self._attribute_id)
                element.rank    = rank

    def sort_impl(self, elements: list[E]) -> None:
        key = self._attribute_id

        for element in elements:
            element.set_attribute(key, 0.0)

        remaining = list(elements)
        ranked    = []

        while len(remaining) > 1:
            contributions  = self.compute_set_contribution(remaining)
            next_remaining = []

            largest         = -math.inf
            previously_done = len(ranked)

            for element, contribution in zip(remaining, contributions):
                contribution = float(contribution)
                if not equals_delta(contribution, 0.0):
                    element.set_attribute(key, contribution)
                    ranked.append(element)
                    largest = max(largest, contribution)
                elif self.iterative:
                    next_remaining.append(element)

            if len(ranked) == previously_done:
                break

            for element in ranked[:previously_done]:
                element.add_attribute(key, largest)

            remaining = next_remaining

        # 'ranked' may hold a subset of 'elements' only
        elements.sort(key=lambda element: element.get_attribute(key), reverse=True)

        if self.next is not None:
            self._sort_ties(elements)

    def _sort_ties(self, elements: list[E]) -> None:
        """Re-rank every run of equal scores with the subordinate procedure."""
        key    = self._attribute_id
        blocks = []

        start = -1
        for i in range(1, len(elements)):
            if equals_delta(elements[i].get_attribute(key), elements[i - 1].get_attribute(key)):
                if start == -1:
                    start = i - 1
            elif start != -1:
                blocks.append((start, i - 1))
                start = -1
        if start != -1:
            blocks.append((start, len(elements) - 1))

        # Bounds depend on the neighbours' scores, which must be read before any block is rewritten
        bounds = [self._block_bounds(start, end, elements) for start, end in blocks]

        for (start, end), (low, high) in zip(blocks, bounds):
            block = elements[start:end + 1]
            self.next.sort(block)
            self.normalize_attribute(block, self.next.attribute_id, key, low, high)
            elements[start:end + 1] = block

    def _block_bounds(self, start: int, end: int, elements: list[E]) -> tuple[float, float]:
        """Score range available to the tied block [start, end]."""
        key = self._attribute_id
        own = elements[start].get_attribute(key)

        low, high = 0.0, 1.0
        if end < len(elements) - 1:
            low = elements[end + 1].get_attribute(key)
        if start > 0:
            high = elements[start - 1].get_attribute(key)
        elif own > high:
            high = own

        if high < low:
            high = low + 1.0

        fraction = (1.0 - self.U) * 0.5
        return own - (own - low) * fraction, own + (high - own) * fraction

    # ==========================================================================
    # Normalization
    # ==========================================================================

    @staticmethod
    def normalize_attribute(elements : Sequence[FitnessElement],
                            source_id: int,
                            target_id: int,
                            min_target: float,
                            max_target: float) -> None:
        """
        Map the scores stored under 'source_id' linearly onto [min_target, max_target]
        and store them under 'target_id'. An empty target range means [0, 1];
        equal source scores all map to the middle of the target range.
        """
        if equals_delta(min_target, max_target):
            min_target, max_target = 0.0, 1.0

        values     = [element.get_attribute(source_id) for element in elements]
        min_source = min(values)
        max_source = max(values)
        diff       = max_source - min_source

        if equals_delta(diff, 0.0):
            for element in elements:
                element.set_attribute(target_id, (min_target + max_target) / 2.0)
        else:
            scale = (max_target - min_target) / diff
            for element, value in zip(elements, values):
                element.set_attribute(target_id, min_target + (value - min_source) * scale)

    def to_matrix(self, elements: Sequence[FitnessElement]) -> np.ndarray:
        """
        Stack the fitness vectors of 'elements' into a matrix.

        Raises:
            ValueError: If 'elements' is empty or an element has no fitness
        """
        if not elements:
            raise ValueError(f"{self.name}: cannot score an empty set")
        if any(element.fitness is None for element in elements):
            raise ValueError(f"{self.name}: every element needs a fitness vector")

        matrix = np.array([element.fitness for element in elements], dtype=float)

        if self.evolution_mode and self.normalize_during_evolution:
            return self.normalize(matrix)
        return matrix

    def normalize(self, matrix: np.ndarray) -> np.ndarray:
        """
        Min-max normalize every objective (column) to [norm_min_value, norm_min_value + 1].
        NaN entries are ignored and kept; constant columns are left unchanged.
        """
        result = np.array(matrix, dtype=float)
        valid  = ~np.isnan(result)

        mins = np.where(valid, result, np.inf).min(axis=0)
        maxs = np.where(valid, result, -np.inf).max(axis=0)

        for j in range(result.shape[1]):
            if not valid[:, j].any():
                continue
            diff = maxs[j] - mins[j]
            if equals_delta(diff, 0.0):
                continue
            column = valid[:, j]
            result[column, j] = self.norm_min_value + (result[column, j] - mins[j]) / diff

        return result

    def __str__(self):
        return self.name if self.next is None else f"{self.name} > {self.next}"

class ReferenceBasedQProcedure(QProcedure):
    """
    A q-procedure measuring fitness vectors against a reference point.

    Public Attributes:
        reference_point:                   The reference point
        reference_point_correction_factor: Product of the reference point's coordinates
        update_every_call:                 Recompute the reference point before every computation
    """

    def __init__(self, iterative: bool, next_procedure: QProcedure | None = None):
        super().__init__(iterative, next_procedure)
        self.reference_point                  : np.ndarray = np.zeros(0)
        self.reference_point_correction_factor: float      = 1.0
        self.update_every_call                : bool       = True

    @abstractmethod
    def update_reference_point(self, point: np.ndarray, set_size: int) -> None:
        """Derive the reference point from 'point' (e.g. the best value per objective)."""
        pass

    def set_uniform_reference_point(self, dimensions: int, value: float) -> None:
        self.reference_point                   = np.full(dimensions, float(value))
        self.reference_point_correction_factor = float(np.prod(self.reference_point))
