"""
Unit tests for the selection routines.
"""

import pytest
import random

from moneat.pool.selection import (
    equal_distribution,
    linear_distribution,
    roulette_wheel,
    select_indices,
    select_rank_indices,
)


@pytest.fixture(autouse=True)
def seed():
    random.seed(42)


class TestDistributions:

    def test_equal_distribution_is_cumulative_from_back(self):
        assert equal_distribution(4) == pytest.approx([1.0, 0.75, 0.5, 0.25])

    def test_linear_without_pressure_is_uniform(self):
        assert linear_distribution(4, 0.0) == pytest.approx([1.0, 0.75, 0.5, 0.25])

    def test_linear_full_pressure(self):
        assert linear_distribution(3, 1.0, additive=False) == pytest.approx([2.0 / 3.0, 1.0 / 3.0, 0.0])

    def test_linear_probabilities_sum_to_one(self):
        for pressure in (0.0, 0.3, 0.8, 1.0):
            assert sum(linear_distribution(7, pressure, additive=False)) == pytest.approx(1.0)
            assert linear_distribution(7, pressure)[0] == pytest.approx(1.0)

    def test_linear_degenerate_sizes(self):
        assert linear_distribution(1, 0.5) == [1.0]
        assert linear_distribution(0, 0.5) == []


class TestSelectIndices:

    def test_amount(self):
        assert len(select_indices(equal_distribution(5), 12)) == 12

    def test_nothing_to_select(self):
        assert select_indices(equal_distribution(5), 0) == []
        assert select_indices([], 3) == []

    def test_equal_distribution_selects_each_index_once(self):
        assert sorted(select_indices(equal_distribution(4), 4)) == [0, 1, 2, 3]

    def test_rank_indices_in_range(self):
        for index in select_rank_indices(5, 9, 50, 0.8):
            assert 5 <= index <= 9

    def test_full_pressure_never_selects_worst(self):
        assert 2 not in select_rank_indices(0, 2, 100, 1.0)

    def test_pressure_favours_best(self):
        selected = select_rank_indices(0, 9, 1000, 1.0)
        assert selected.count(0) > selected.count(9)


class TestRouletteWheel:

    def test_certain_outcomes(self):
        assert roulette_wheel([0.0, 0.0, 1.0]) == 2
        assert roulette_wheel([1.0, 0.0, 0.0]) == 0

    def test_index_in_range(self):
        for _ in range(20):
            assert 0 <= roulette_wheel([0.2, 0.3, 0.5]) <= 2
