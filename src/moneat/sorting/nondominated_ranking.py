"""
Non-dominated Ranking Module

Classes:
    NondominatedRanking: Scores elements by the index of their non-dominated front
"""

import numpy as np

from moneat.sorting.pareto      import sort_into_fronts
from moneat.sorting.q_procedure import QProcedure

class NondominatedRanking(QProcedure):
    """
    Non-dominated ranking (NSGA-II).

    The contribution of an element in front i (0 = best) out of F fronts is F - i.
    Elements of one front tie, so a subordinate procedure (e.g. crowding distance,
    hypervolume or R2) usually orders each front.
    """

    key        = 0
    name       = "Non-dominated Ranking"
    name_short = "NDR"
    normalize_during_evolution = False

    def __init__(self, next_procedure: QProcedure | None = None):
        super().__init__(False, next_procedure)

    def compute_value(self, matrix: np.ndarray) -> float:
        """The set value of the subordinate procedure; -1 if there is none."""
        if self.next is not None:
            return self.next.compute_value(matrix)
        return -1.0

    def compute_contribution(self, matrix: np.ndarray) -> np.ndarray:
        fronts = sort_into_fronts(matrix)
        result = np.zeros(len(matrix))

        for index, front in enumerate(fronts):
            result[front] = len(fronts) - index

        return result
