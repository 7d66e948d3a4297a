"""
Pareto Strength Module

Classes:
    ParetoStrength: Scores elements by the strength of their dominators (SPEA2)
"""

import numpy as np

from moneat.sorting.pareto      import dominance_test
from moneat.sorting.q_procedure import QProcedure

class ParetoStrength(QProcedure):
    """
    Pareto strength.

    The strength of an element is the number of elements it dominates. The
    contribution of an element is 1 / (1 + sum of the strengths of its
    dominators); non-dominated elements score 1.
    """

    key        = 4
    name       = "Pareto Strength"
    name_short = "PS"
    normalize_during_evolution = False

    def __init__(self, next_procedure: QProcedure | None = None):
        super().__init__(False, next_procedure)

    def compute_value(self, matrix: np.ndarray) -> float:
        # Not defined for sets
        return -1.0

    def compute_contribution(self, matrix: np.ndarray) -> np.ndarray:
        n          = len(matrix)
        strength   = np.zeros(n)
        dominators = [[] for _ in range(n)]

        for i in range(n - 1):
            for j in range(i + 1, n):
                result = dominance_test(matrix[i], matrix[j])
                if result < 0:
                    strength[i] += 1
                    dominators[j].append(i)
                elif result > 0:
                    strength[j] += 1
                    dominators[i].append(j)

        raw = np.array([strength[d].sum() for d in dominators])
        return 1.0 / (1.0 + raw)
