"""
R2 Indicator Module

Classes:
    R2Indicator: Q-procedure based on the weighted Chebyshev distance to an ideal point
"""

import math

import numpy as np

from moneat.sorting.q_procedure import QProcedure, ReferenceBasedQProcedure
from moneat.sorting.weights     import HammersleyWeights

class R2Indicator(ReferenceBasedQProcedure):
    """
    R2 indicator (Kuenzel and Meyer-Nieberg, 2020).

    The value of a set is the mean, over uniformly spread weight vectors, of the
    smallest weighted Chebyshev distance between a member and the reference
    point (the origin of the normalized objective space; normalized values
    start at 1).

    The contribution of an element is computed in a single pass: for every
    weight vector only the best and second-best members are tracked, and the
    best one is credited with the difference, i.e. the loss if it were removed.

    Public Attributes:
        num_weight_vectors: Number of weight vectors (default 100)
    """

    key        = 1
    name       = "R2 Indicator"
    name_short = "R2"
    normalize_during_evolution = True

    def __init__(self, iterative: bool = False, next_procedure: QProcedure | None = None):
        super().__init__(iterative, next_procedure)
        self.norm_min_value    : float             = 1.0
        self.num_weight_vectors: int               = 100
        self._weight_generator : HammersleyWeights = HammersleyWeights()

    def update_reference_point(self, point: np.ndarray, set_size: int) -> None:
        self.reference_point                   = np.asarray(point, dtype=float)
        self.reference_point_correction_factor = 1.0

    def _weights(self, num_objectives: int) -> np.ndarray:
        if self.update_every_call:
            self.set_uniform_reference_point(num_objectives, 0.0)
        return self._weight_generator.weight_vectors(self.num_weight_vectors, num_objectives)

    def compute_value(self, matrix: np.ndarray) -> float:
        matrix = np.asarray(matrix, dtype=float)
        if len(matrix) == 0:
            raise ValueError(f"{self.name}: cannot compute the value of an empty set")

        weights = self._weights(matrix.shape[1])

        # distances[l, i]: weighted Chebyshev distance of member i for weight vector l
        differences = np.abs(self.reference_point - matrix)
        distances   = (weights[:, None, :] * differences[None, :, :]).max(axis=2)

        return float(distances.min(axis=1).mean())

    def compute_contribution(self, matrix: np.ndarray) -> np.ndarray:
        matrix = np.asarray(matrix, dtype=float)
        result = np.zeros(len(matrix))
        if len(matrix) < 2:
            result[:] = 1.0
            return result

        weights = self._weights(matrix.shape[1])

        for weight in weights:
            first, second = math.inf, math.inf
            index_min     = -1

            for i, point in enumerate(matrix):
                distance = weight[0] * abs(point[0] - self.reference_point[0])
                if distance >= second:
                    continue

                too_large = False
                for k in range(1, len(point)):
                    value = weight[k] * abs(point[k] - self.reference_point[k])
                    if value >= second:
                        too_large = True
                        break
                    distance = max(distance, value)

                if too_large:
                    continue

                if distance < first:
                    second, first = first, distance
                    index_min     = i
                elif distance < second:
                    second = distance

            if index_min != -1 and not math.isinf(second):
                result[index_min] += second - first

        return result / len(weights)
