"""
Single-Objective Module

Classes:
    SingleObjective: Scores elements by their (normalized) first objective
"""

import numpy as np

from moneat.sorting.q_procedure import QProcedure

class SingleObjective(QProcedure):
    """Contribution 1 - f1 of the normalized first objective; other objectives are ignored."""

    key        = 6
    name       = "Single-Objective"
    name_short = "SO"
    normalize_during_evolution = True

    def __init__(self, next_procedure: QProcedure | None = None):
        super().__init__(False, next_procedure)

    def compute_value(self, matrix: np.ndarray) -> float:
        # Not defined for sets
        return -1.0

    def compute_contribution(self, matrix: np.ndarray) -> np.ndarray:
        return 1.0 - np.asarray(matrix, dtype=float)[:, 0]
