"""
Unit tests for the q-procedures.

Tests cover the ranking driver shared by all procedures (q-values, ranks,
tie breaking by a subordinate procedure), normalization, and the scores of
non-dominated ranking, Pareto strength, crowding distance, R2, Riesz s-energy,
single objective and the combined procedure.
"""

import math
import pytest
import numpy as np

from moneat.genotype.fitness_element import FitnessElement
from moneat.sorting import (
    CombinedQProcedure,
    CrowdingDistance,
    Hypervolume,
    NondominatedRanking,
    ParetoStrength,
    R2Indicator,
    RieszSEnergy,
    SingleObjective,
    equals_delta,
)
from moneat.sorting.q_procedure import QProcedure


# ============================================================================
# Test Fixtures
# ============================================================================

def elements(*vectors):
    result = []
    for index, vector in enumerate(vectors):
        e = FitnessElement(index)
        e.fitness = np.array(vector, dtype=float)
        result.append(e)
    return result


FRONT     = [[0.0, 4.0], [1.0, 3.0], [2.0, 2.0], [3.0, 1.0], [4.0, 0.0]]
DOMINATED = [[3.0, 3.0], [4.5, 4.5]]

PROCEDURES = [
    lambda: NondominatedRanking(),
    lambda: NondominatedRanking(CrowdingDistance()),
    lambda: NondominatedRanking(Hypervolume()),
    lambda: NondominatedRanking(R2Indicator()),
    lambda: Hypervolume(iterative=True),
    lambda: R2Indicator(iterative=True),
    lambda: ParetoStrength(),
    lambda: CrowdingDistance(),
    lambda: RieszSEnergy(),
    lambda: SingleObjective(),
    lambda: CombinedQProcedure(NondominatedRanking(Hypervolume()), RieszSEnergy()),
]


# ============================================================================
# Test: Common sorting properties
# ============================================================================

class TestSortProperties:
    """Properties every q-procedure must satisfy after 'sort()'."""

    @pytest.mark.parametrize("factory", PROCEDURES)
    def test_q_values_normalized_and_non_increasing(self, factory):
        population = elements(*(FRONT + DOMINATED))
        factory().sort(population)

        q_values = [e.q_value for e in population]
        assert all(0.0 <= q <= 1.0 for q in q_values)
        assert all(a >= b - 1e-12 for a, b in zip(q_values, q_values[1:]))

    @pytest.mark.parametrize("factory", PROCEDURES)
    def test_ranks_are_positions(self, factory):
        population = elements(*(FRONT + DOMINATED))
        factory().sort(population)

        assert [e.rank for e in population] == list(range(len(population)))
        assert sorted(e.id for e in population) == list(range(7))

    @pytest.mark.parametrize("factory", PROCEDURES[:4])
    def test_dominated_elements_ranked_last(self, factory):
        population = elements(*(FRONT + DOMINATED))
        factory().sort(population)

        assert {e.id for e in population[:5]} == {0, 1, 2, 3, 4}
        assert [e.id for e in population[5:]] == [5, 6]

    def test_single_element(self):
        population = elements([1.0, 1.0])
        NondominatedRanking(Hypervolume()).sort(population)
        assert population[0].rank == 0
        assert population[0].q_value == 0.5

    def test_empty_population(self):
        population = []
        NondominatedRanking().sort(population)
        assert population == []


# ============================================================================
# Test: Ranking driver
# ============================================================================

class TestRankingDriver:

    def test_nondominated_ranking_q_values(self):
        population = elements([3, 3], [1, 1], [2, 2])
        NondominatedRanking().sort(population)

        assert [e.id for e in population] == [1, 2, 0]
        assert [e.q_value for e in population] == pytest.approx([1.0, 0.5, 0.0])

    def test_ties_broken_by_subordinate_procedure(self):
        """Crowding distance puts the extremes of a front first."""
        population = elements(*FRONT)
        NondominatedRanking(CrowdingDistance()).sort(population)

        assert {population[0].id, population[1].id} == {0, 4}
        assert population[0].q_value == 1.0

    def test_ties_stay_between_neighbouring_fronts(self):
        population = elements([0, 2], [2, 0], [1, 1], [3, 3], [3, 4], [4, 3])
        NondominatedRanking(CrowdingDistance()).sort(population)

        assert {e.id for e in population[:3]} == {0, 1, 2}
        assert population[3].id == 3
        assert {e.id for e in population[4:]} == {4, 5}

    def test_only_head_writes_q_values(self):
        subordinate = CrowdingDistance()
        head        = NondominatedRanking(subordinate)

        assert subordinate.previous is head
        assert head.previous is None

    def test_attribute_ids_unique(self):
        ids = {NondominatedRanking().attribute_id for _ in range(5)}
        assert len(ids) == 5

    def test_str_describes_chain(self):
        assert str(NondominatedRanking(Hypervolume())) == "Non-dominated Ranking > Hypervolume"

    def test_iterative_hypervolume_ranks_every_element(self):
        population = elements(*(FRONT + DOMINATED))
        Hypervolume(iterative=True).sort(population)
        assert population[-1].id == 6


# ============================================================================
# Test: Normalization
# ============================================================================

class TestNormalization:

    def test_equals_delta(self):
        assert equals_delta(0.1 + 0.2, 0.3)
        assert not equals_delta(0.3, 0.3001)

    def test_normalize_columns(self):
        matrix = np.array([[0.0, 10.0], [5.0, 20.0], [10.0, 30.0]])
        result = SingleObjective().normalize(matrix)
        assert result == pytest.approx(np.array([[0.0, 0.0], [0.5, 0.5], [1.0, 1.0]]))

    def test_normalize_offset(self):
        result = R2Indicator().normalize(np.array([[0.0], [2.0]]))
        assert result[:, 0] == pytest.approx([1.0, 2.0])

    def test_constant_column_unchanged(self):
        result = SingleObjective().normalize(np.array([[3.0, 1.0], [3.0, 2.0]]))
        assert list(result[:, 0]) == [3.0, 3.0]

    def test_nan_ignored(self):
        result = SingleObjective().normalize(np.array([[0.0], [np.nan], [4.0]]))
        assert result[0, 0] == 0.0
        assert math.isnan(result[1, 0])
        assert result[2, 0] == 1.0

    def test_normalize_attribute_constant_values(self):
        population = elements([0], [1])
        for e in population:
            e.set_attribute(99, 0.3)
        QProcedure.normalize_attribute(population, 99, 100, 0.0, 1.0)
        assert [e.get_attribute(100) for e in population] == [0.5, 0.5]

    def test_to_matrix_errors(self):
        with pytest.raises(ValueError):
            NondominatedRanking().to_matrix([])

        with pytest.raises(ValueError):
            NondominatedRanking().to_matrix([FitnessElement(0)])


# ============================================================================
# Test: Individual procedures
# ============================================================================

class TestParetoStrength:

    def test_contributions(self):
        contribution = ParetoStrength().compute_set_contribution(elements([1, 1], [2, 2], [3, 3]))
        assert contribution == pytest.approx([1.0, 1.0 / 3.0, 0.25])

    def test_no_set_value(self):
        assert ParetoStrength().compute_set_value(elements([1, 1])) == -1.0


class TestCrowdingDistance:

    def test_contributions(self):
        contribution = CrowdingDistance().compute_contribution(np.array(FRONT))
        assert contribution == pytest.approx([2.0, 1.0, 1.0, 1.0, 2.0])

    def test_small_sets(self):
        assert list(CrowdingDistance().compute_contribution(np.array([[1.0, 2.0], [2.0, 1.0]]))) == [1.0, 1.0]

    def test_value_is_mean(self):
        assert CrowdingDistance().compute_value(np.array(FRONT)) == pytest.approx(1.4)


class TestR2Indicator:

    def test_dominated_point_contributes_nothing(self):
        contribution = R2Indicator().compute_contribution(np.array([[1.0, 2.0], [2.0, 1.0], [3.0, 3.0]]))
        assert contribution[0] > 0.0
        assert contribution[1] > 0.0
        assert contribution[2] == 0.0

    def test_value_prefers_points_near_ideal(self):
        r2 = R2Indicator()
        assert r2.compute_value(np.array([[1.0, 1.0]])) < r2.compute_value(np.array([[2.0, 2.0]]))

    def test_small_sets(self):
        assert list(R2Indicator().compute_contribution(np.array([[1.0, 1.0]]))) == [1.0]

    def test_nondominated_ranking_value_delegates(self):
        matrix = np.array([[1.0, 2.0], [2.0, 1.0]])
        assert NondominatedRanking(R2Indicator()).compute_value(matrix) == pytest.approx(
            R2Indicator().compute_value(matrix))
        assert NondominatedRanking().compute_value(matrix) == -1.0


class TestRieszSEnergy:

    def test_isolated_point_scores_highest(self):
        contribution = RieszSEnergy().compute_contribution(np.array([[0.0, 0.0], [0.01, 0.0], [1.0, 1.0]]))
        assert contribution[2] > contribution[0]
        assert contribution[2] > contribution[1]

    def test_coinciding_points_score_zero(self):
        contribution = RieszSEnergy().compute_contribution(np.array([[0.5, 0.5], [0.5, 0.5]]))
        assert contribution == pytest.approx([0.0, 0.0])

    def test_small_sets(self):
        assert list(RieszSEnergy().compute_contribution(np.array([[0.5, 0.5]]))) == [1.0]


class TestSingleObjective:

    def test_ranks_by_first_objective(self):
        population = elements([3, 0], [1, 5], [2, 1])
        SingleObjective().sort(population)

        assert [e.id for e in population] == [1, 2, 0]
        assert [e.q_value for e in population] == pytest.approx([1.0, 0.5, 0.0])


class TestCombinedQProcedure:

    def test_sub_procedures_are_attached(self):
        first, second = NondominatedRanking(), RieszSEnergy()
        combined      = CombinedQProcedure(first, second)

        assert first.previous is combined
        assert second.previous is combined
        assert "Combined" in str(combined)

    def test_value_is_product(self):
        matrix   = np.array(FRONT) / 4.0 + 1.0
        combined = CombinedQProcedure(CrowdingDistance(), CrowdingDistance())
        assert combined.compute_value(matrix) == pytest.approx(1.4 * 1.4)
