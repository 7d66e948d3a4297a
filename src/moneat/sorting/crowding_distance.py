"""
Crowding Distance Module

Classes:
    CrowdingDistance: Scores elements by the normalized gap to their neighbours (NSGA-II)
"""

import numpy as np

from moneat.sorting.q_procedure import QProcedure, equals_delta

class CrowdingDistance(QProcedure):
    """
    Crowding distance.

    For every objective the elements are sorted by that objective; each inner
    element accumulates the gap between its two neighbours divided by the
    objective's range, and both extremes receive 1 (instead of infinity).
    Objectives of zero range are skipped. Sets of fewer than three elements
    score 1 throughout.
    """

    key        = 2
    name       = "Crowding Distance"
    name_short = "CD"
    normalize_during_evolution = True

    def __init__(self, next_procedure: QProcedure | None = None):
        super().__init__(False, next_procedure)

    def compute_value(self, matrix: np.ndarray) -> float:
        """Mean contribution."""
        return float(np.mean(self.compute_contribution(matrix)))

    def compute_contribution(self, matrix: np.ndarray) -> np.ndarray:
        matrix = np.asarray(matrix, dtype=float)
        n      = len(matrix)
        if n < 3:
            return np.ones(n)

        distance = np.zeros(n)
        order    = np.arange(n)

        for k in range(matrix.shape[1]):
            # Stable sort, starting from the previous objective's order
            order = order[np.argsort(matrix[order, k], kind='stable')]
            diff  = matrix[order[-1], k] - matrix[order[0], k]

            if equals_delta(diff, 0.0):
                continue

            distance[order[0]]  += 1.0
            distance[order[-1]] += 1.0

            for i in range(1, n - 1):
                distance[order[i]] += (matrix[order[i + 1], k] - matrix[order[i - 1], k]) / diff

        return distance
