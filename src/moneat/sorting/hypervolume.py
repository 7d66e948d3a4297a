"""
Hypervolume Module

This module implements the hypervolume indicator with the Hypervolume by
Slicing Objectives (HSO) algorithm of While et al. (2006).

Functions:
    hypervolume: Volume dominated by a set of points with respect to a fixed reference point

Classes:
    Hypervolume: Q-procedure scoring elements by their exclusive hypervolume contribution
"""

import numpy as np

from moneat.sorting.pareto      import dominance_test
from moneat.sorting.q_procedure import QProcedure, ReferenceBasedQProcedure

class Hypervolume(ReferenceBasedQProcedure):
    """
    Hypervolume (HSO).

    During evolution the (normalized) reference point is placed at r = 1 + 1/H
    in every objective, where H is chosen from the binomial table of
    Ishibuchi et al. (2018) so that the set size matches a uniform simplex
    lattice; the value is divided by r^K so it stays comparable across set sizes.
    Outside evolution the reference point is 1.1 in every objective.
    Set 'update_every_call' to False to keep a reference point set by hand.

    The contribution of an element is the volume lost when it is removed.
    Points not strictly better than the reference point in every objective
    contribute nothing.
    """

    key        = 3
    name       = "Hypervolume"
    name_short = "HV"
    normalize_during_evolution = True

    # Number of objectives - 1 => [C(H + k, k) for H in 1..62]
    _bk_table: dict[int, list[int]] = {}

    def __init__(self, iterative: bool = False, next_procedure: QProcedure | None = None):
        super().__init__(iterative, next_procedure)

    @classmethod
    def _lattice_sizes(cls, k: int) -> list[int]:
        if k not in cls._bk_table:
            cls._bk_table[k] = [_binomial(h + k, k) for h in range(1, 63)]
        return cls._bk_table[k]

    def update_reference_point(self, point: np.ndarray, set_size: int) -> None:
        """Scale 'point' by r = 1 + 1/H (see class docstring)."""
        sizes = self._lattice_sizes(len(point) - 1)

        h = -1
        for index in range(len(sizes) - 1):
            if sizes[index] <= set_size < sizes[index + 1]:
                h = index + 1
                break
        if h == -1:
            h = len(point)

        r = 1.0 + 1.0 / h
        self.reference_point                   = np.asarray(point, dtype=float) * r
        self.reference_point_correction_factor = r ** len(point)

    def compute_value(self, matrix: np.ndarray) -> float:
        matrix = np.asarray(matrix, dtype=float)
        if len(matrix) == 0:
            raise ValueError(f"{self.name}: cannot compute the value of an empty set")

        if self.update_every_call:
            if self.evolution_mode:
                self.update_reference_point(np.ones(matrix.shape[1]), len(matrix))
            else:
                self.set_uniform_reference_point(matrix.shape[1], 1.1)

        return self.hso(matrix) / self.reference_point_correction_factor

    def compute_contribution(self, matrix: np.ndarray) -> np.ndarray:
        matrix = np.asarray(matrix, dtype=float)
        total  = self.compute_value(matrix)

        contribution = np.zeros(len(matrix))
        if len(matrix) < 2:
            contribution[:] = total
            return contribution

        for index in range(len(matrix)):
            contribution[index] = total - self.compute_value(np.delete(matrix, index, axis=0))

        return contribution

    # ==========================================================================
    # HSO
    # ==========================================================================

    def hso(self, matrix: np.ndarray) -> float:
        """Volume dominated by the rows of 'matrix' with respect to the reference point."""
        reference = self.reference_point
        points    = [tuple(row) for row in matrix if np.all(row < reference)]
        if not points:
            return 0.0

        num_objectives = len(reference)
        if num_objectives == 1:
            return float(reference[0] - min(p[0] for p in points))

        points.sort(key=lambda p: p[0])

        slices = [(1.0, points)]
        for k in range(num_objectives - 2):
            slices = [s for depth, ql in slices for s in self._slice(ql, k, depth)]

        return sum(self._hv_2d(ql, depth) for depth, ql in slices)

    def _hv_2d(self, front: list[tuple], depth: float) -> float:
        """Area dominated by 'front' in the last two objectives, times 'depth'."""
        x, y      = len(self.reference_point) - 2, len(self.reference_point) - 1
        reference = self.reference_point

        # Keep the non-dominated staircase, sorted by x
        staircase = []
        for p in sorted(front, key=lambda p: (p[x], p[y])):
            if not staircase or p[y] < staircase[-1][y]:
                staircase.append(p)

        volume = 0.0
        for current, following in zip(staircase, staircase[1:]):
            volume += (following[x] - current[x]) * (reference[y] - current[y])
        volume += (reference[x] - staircase[-1][x]) * (reference[y] - staircase[-1][y])

        return volume * depth

    def _slice(self, points: list[tuple], k: int, parent_depth: float) -> list[tuple[float, list[tuple]]]:
        """Cut 'points' (sorted by objective k) into slabs along objective k."""
        slices = []
        ql     = []

        p = points[0]
        for following in points[1:]:
            ql    = self._insert(p, k + 1, ql)
            depth = abs(p[k] - following[k])
            if depth > 0:
                slices.append((parent_depth * depth, ql))
            p = following

        ql    = self._insert(p, k + 1, ql)
        depth = abs(p[k] - self.reference_point[k])
        if depth > 0:
            slices.append((parent_depth * depth, ql))

        return slices

    @staticmethod
    def _insert(p: tuple, k: int, points: list[tuple]) -> list[tuple]:
        """Insert 'p' into 'points' (sorted by objective k), dropping the points it dominates."""
        result = []
        index  = len(points)
        for i, q in enumerate(points):
            if q[k] < p[k]:
                result.append(q)
            else:
                index = i
                break

        result.append(p)
        result.extend(q for q in points[index:] if dominance_test(p, q, k) != -1)
        return result

def _binomial(n: int, k: int) -> int:
    if 2 * k > n:
        k = n - k
    result = 1
    for i in range(1, k + 1):
        result = result * (n - k + i) // i
    return result

def hypervolume(points, reference_point) -> float:
    """
    Volume dominated by 'points' (minimization) with respect to 'reference_point'.

    Parameters:
        points:          Sequence of objective vectors
        reference_point: The reference point

    Returns:
        The hypervolume, without any normalization or correction
    """
    procedure                                   = Hypervolume()
    procedure.evolution_mode                    = False
    procedure.update_every_call                 = False
    procedure.reference_point                   = np.asarray(reference_point, dtype=float)
    procedure.reference_point_correction_factor = 1.0

    return procedure.compute_value(np.atleast_2d(np.asarray(points, dtype=float)))
