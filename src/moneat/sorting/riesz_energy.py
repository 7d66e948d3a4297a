"""
Riesz s-Energy Module

Classes:
    RieszSEnergy: Diversity score from a capped inverse-power-law potential
"""

import numpy as np

from moneat.sorting.q_procedure import QProcedure

class RieszSEnergy(QProcedure):
    """
    Inverted, limited Riesz s-energy.

    Every pair of elements contributes d^(-s) to both elements' energy, where d
    is their squared Euclidean distance (objectives that are NaN in either vector
    are skipped), floored at 'min_square_distance'. The contribution of an element
    is 1 - energy / c_max with c_max = min_square_distance^(-s) * (n - 1), the
    energy of an element coinciding with all others: isolated elements score high.
    """

    key        = 5
    name       = "Inv. Limited Riesz S-energy"
    name_short = "IL-RSE"
    normalize_during_evolution = True

    def __init__(self,
                 s                  : float = 1.0,
                 min_square_distance: float = 0.001,
                 next_procedure     : QProcedure | None = None):
        super().__init__(False, next_procedure)
        self.s                  : float = s
        self.min_square_distance: float = min_square_distance

    def compute_value(self, matrix: np.ndarray) -> float:
        """Mean contribution."""
        return float(np.mean(self.compute_contribution(matrix)))

    def compute_contribution(self, matrix: np.ndarray) -> np.ndarray:
        n = len(matrix)
        if n < 2:
            return np.ones(n)

        energy = np.zeros(n)
        for i in range(n - 1):
            for j in range(i + 1, n):
                d = matrix[i] - matrix[j]
                square_distance = max(float(np.nansum(d * d)), self.min_square_distance)

                s_energy   = square_distance ** -self.s
                energy[i] += s_energy
                energy[j] += s_energy

        c_max = self.min_square_distance ** -self.s * (n - 1)
        return 1.0 - energy / c_max
