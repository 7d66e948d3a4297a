"""
Combined Q-Procedure Module

Classes:
    MetaFitnessElement: Stand-in element whose fitness is a pair of q-values
    CombinedQProcedure: Balances two q-procedures by ranking their q-values
"""

import numpy as np

from moneat.genotype.fitness_element     import FitnessElement
from moneat.sorting.nondominated_ranking import NondominatedRanking
from moneat.sorting.q_procedure          import E, QProcedure
from moneat.sorting.r2_indicator         import R2Indicator

class MetaFitnessElement(FitnessElement):
    """Wraps an element; its fitness is (1 - q1, 1 - q2)."""

    def __init__(self, element: FitnessElement):
        super().__init__(element.id)
        self.element: FitnessElement = element

class CombinedQProcedure(QProcedure):
    """
    Meta q-procedure combining two q-procedures, e.g. a quality and a diversity measure.

    Both procedures score the set independently; their scores, normalized to
    [0, 1], form a synthetic 2-objective fitness (1 - q1, 1 - q2) per element,
    which is ranked by the meta procedure (non-dominated ranking refined by R2).

    Public Attributes:
        first:  First q-procedure
        second: Second q-procedure
        meta:   Q-procedure ranking the synthetic fitness vectors
    """

    key        = -1
    name       = "Combined"
    name_short = "CC"
    normalize_during_evolution = True

    def __init__(self, first: QProcedure, second: QProcedure):
        super().__init__(False)
        self.first : QProcedure = first
        self.second: QProcedure = second
        self.meta  : QProcedure = NondominatedRanking(R2Indicator())

        first.previous  = self
        second.previous = self

    def sort_impl(self, elements: list[E]) -> None:
        first_id, second_id = self.first.attribute_id, self.second.attribute_id

        self.first.sort_impl(elements)
        self.second.sort_impl(elements)
        self.normalize_attribute(elements, first_id,  first_id,  0.0, 1.0)
        self.normalize_attribute(elements, second_id, second_id, 0.0, 1.0)

        meta_elements = []
        for element in elements:
            meta_element         = MetaFitnessElement(element)
            meta_element.fitness = np.array([1.0 - element.get_attribute(first_id),
                                             1.0 - element.get_attribute(second_id)])
            meta_elements.append(meta_element)

        self.meta.sort(meta_elements)

        for meta_element in meta_elements:
            meta_element.element.set_attribute(self.attribute_id,
                                               meta_element.get_attribute(self.meta.attribute_id))

        elements.sort(key=lambda element: element.get_attribute(self.attribute_id), reverse=True)

    def compute_value(self, matrix: np.ndarray) -> float:
        """Product of both procedures' set values."""
        return self.first.compute_value(matrix) * self.second.compute_value(matrix)

    def compute_contribution(self, matrix: np.ndarray) -> np.ndarray:
        """Contributions of the first procedure."""
        return self.first.compute_contribution(matrix)

    def __str__(self):
        return f"{self.name}({self.first}, {self.second})"
