"""
Difference Metrics Module

This module implements the measures of (dis)similarity used by the speciators.

Classes:
    DifferenceMetric:  Abstract difference between two genotypes
    NetworkDifference: Stanley's compatibility distance between NEAT genomes
    FitnessDifference: Squared Euclidean distance in objective space
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import numpy as np

from moneat.run.parameters import Parameter, Parameterized
if TYPE_CHECKING:
    from moneat.genotype.genotype         import Genotype
    from moneat.genotype.network_genotype import NetworkGenotype

class DifferenceMetric(ABC):

    @abstractmethod
    def difference(self, a: 'Genotype', b: 'Genotype') -> float:
        pass

class NetworkDifference(DifferenceMetric):
    """
    Compatibility distance of Stanley (2004), bounded per term.

        ((c1 * E + c2 * D) / N  +  min(c3 * W, c1)) / 2

    E: number of excess genes, D: number of disjoint genes, N: size of the
    longer genome, W: mean absolute weight difference of the common genes.
    Genomes without common genes get the maximal weight term c1.

    The coefficients are read from the Parameterized object on every call.
    """

    def __init__(self, parameterized: Parameterized):
        self.parameterized: Parameterized = parameterized

    def difference(self, a: 'NetworkGenotype', b: 'NetworkGenotype') -> float:
        c1 = self.parameterized.get(Parameter.Factor_C1_Excess)
        c2 = self.parameterized.get(Parameter.Factor_C2_Disjoint)
        c3 = self.parameterized.get(Parameter.Factor_C3_Weight_Difference)

        num_excess, num_disjoint, num_common, weight_difference = gene_alignment(a, b)

        longest = max(len(a.links), len(b.links))
        if longest == 0:
            return 0.0

        different_structure = (c1 * num_excess + c2 * num_disjoint) / longest
        different_weights   = min(c3 * weight_difference / num_common, c1) if num_common else c1

        return (different_structure + different_weights) / 2.0

def gene_alignment(a: 'NetworkGenotype', b: 'NetworkGenotype') -> tuple[int, int, int, float]:
    """
    Align two genomes by innovation ID.

    Returns:
        4-tuple: (excess, disjoint, common, summed absolute weight difference of common genes)
    """
    i, j = 0, 0
    num_disjoint, num_common = 0, 0
    weight_difference        = 0.0

    while i < len(a.links) and j < len(b.links):
        id_a, id_b = a.links[i].innovation_id, b.links[j].innovation_id
        if id_a == id_b:
            weight_difference += abs(a.links[i].weight - b.links[j].weight)
            num_common        += 1
            i += 1
            j += 1
        elif id_a < id_b:
            num_disjoint += 1
            i += 1
        else:
            num_disjoint += 1
            j += 1

    num_excess = (len(a.links) - i) + (len(b.links) - j)
    return num_excess, num_disjoint, num_common, weight_difference

class FitnessDifference(DifferenceMetric):
    """Squared Euclidean distance of the fitness vectors."""

    def difference(self, a: 'Genotype', b: 'Genotype') -> float:
        d = np.asarray(a.fitness, dtype=float) - np.asarray(b.fitness, dtype=float)
        return float(np.dot(d, d))
