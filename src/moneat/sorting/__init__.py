"""
Sorting Package

This package provides Pareto dominance utilities and the q-procedures that
rank sets of (multi-objective) fitness vectors.

Exported:
    dominance_test, sort_into_fronts, nondominated_subset: Pareto dominance
    QProcedure, ReferenceBasedQProcedure:                  Q-procedure framework
    NondominatedRanking, Hypervolume, R2Indicator, CrowdingDistance,
    ParetoStrength, RieszSEnergy, SingleObjective:         Q-procedures
    CombinedQProcedure:                                    Combination of two q-procedures
    hypervolume:                                           Hypervolume of a point set
    HammersleyWeights:                                     Weight vectors of the R2 indicator
"""

from moneat.sorting.pareto               import dominance_test, sort_into_fronts, nondominated_subset
from moneat.sorting.q_procedure          import QProcedure, ReferenceBasedQProcedure, equals_delta
from moneat.sorting.nondominated_ranking import NondominatedRanking
from moneat.sorting.hypervolume          import Hypervolume, hypervolume
from moneat.sorting.r2_indicator         import R2Indicator
from moneat.sorting.crowding_distance    import CrowdingDistance
from moneat.sorting.pareto_strength      import ParetoStrength
from moneat.sorting.riesz_energy         import RieszSEnergy
from moneat.sorting.single_objective     import SingleObjective
from moneat.sorting.combined             import CombinedQProcedure
from moneat.sorting.weights              import HammersleyWeights

__all__ = [
    'dominance_test',
    'sort_into_fronts',
    'nondominated_subset',
    'QProcedure',
    'ReferenceBasedQProcedure',
    'equals_delta',
    'NondominatedRanking',
    'Hypervolume',
    'hypervolume',
    'R2Indicator',
    'CrowdingDistance',
    'ParetoStrength',
    'RieszSEnergy',
    'SingleObjective',
    'CombinedQProcedure',
    'HammersleyWeights'
]
