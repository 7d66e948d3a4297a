"""
Unit tests for the hypervolume function and the Hypervolume q-procedure.
"""

import pytest
import numpy as np

from moneat.sorting.hypervolume import Hypervolume, hypervolume


# ============================================================================
# Test: hypervolume()
# ============================================================================

class TestHypervolumeFunction:
    """Volumes checked against hand-computed boxes."""

    def test_single_point(self):
        assert hypervolume([[0.5, 0.5]], [1.0, 1.0]) == pytest.approx(0.25)

    def test_staircase_2d(self):
        assert hypervolume([[0.0, 1.0], [1.0, 0.0]], [2.0, 2.0]) == pytest.approx(3.0)

    def test_dominated_points_add_nothing(self):
        front = [[0.2, 0.6], [0.6, 0.2]]
        assert hypervolume(front + [[0.7, 0.7]], [1, 1]) == pytest.approx(hypervolume(front, [1, 1]))

    def test_points_outside_reference_box_ignored(self):
        assert hypervolume([[0.5, 0.5], [2.0, 0.0], [0.0, 1.0]], [1, 1]) == pytest.approx(0.25)

    def test_nothing_inside_reference_box(self):
        assert hypervolume([[1.0, 1.0]], [1, 1]) == 0.0

    def test_one_objective(self):
        assert hypervolume([[0.3], [0.6]], [1.0]) == pytest.approx(0.7)

    def test_three_objectives_single_box(self):
        assert hypervolume([[0.0, 0.0, 0.0]], [1, 1, 1]) == pytest.approx(1.0)

    def test_three_objectives_union(self):
        """Union of boxes 0.25 and 0.5 overlapping in 0.125."""
        points = [[0.0, 0.5, 0.5], [0.5, 0.0, 0.0]]
        assert hypervolume(points, [1, 1, 1]) == pytest.approx(0.625)

    def test_three_objectives_order_independent(self):
        rng    = np.random.default_rng(3)
        points = rng.random((12, 3))
        assert hypervolume(points, [1.1] * 3) == pytest.approx(hypervolume(points[::-1], [1.1] * 3))

    def test_four_objectives_monotonic(self):
        rng    = np.random.default_rng(4)
        points = rng.random((8, 4))
        assert hypervolume(points, [1.1] * 4) >= hypervolume(points[:4], [1.1] * 4)


# ============================================================================
# Test: Hypervolume q-procedure
# ============================================================================

class TestHypervolumeProcedure:

    @pytest.fixture
    def procedure(self):
        procedure                                   = Hypervolume()
        procedure.update_every_call                 = False
        procedure.reference_point                   = np.array([1.1, 1.1])
        procedure.reference_point_correction_factor = 1.0
        return procedure

    def test_contributions(self, procedure):
        matrix = np.array([[0.2, 0.8], [0.5, 0.5], [0.8, 0.2], [0.9, 0.9]])
        contribution = procedure.compute_contribution(matrix)

        assert contribution[1] == pytest.approx(0.09)
        assert contribution[0] > 0.0
        assert contribution[2] > 0.0
        assert contribution[3] == pytest.approx(0.0)

    def test_single_element_contributes_whole_volume(self, procedure):
        assert procedure.compute_contribution(np.array([[0.1, 0.1]]))[0] == pytest.approx(1.0)

    def test_empty_set_raises(self, procedure):
        with pytest.raises(ValueError):
            procedure.compute_value(np.zeros((0, 2)))

    def test_evolution_reference_point(self):
        """Ten points in two objectives match the lattice with H = 9."""
        procedure = Hypervolume()
        procedure.update_reference_point(np.ones(2), 10)

        assert procedure.reference_point == pytest.approx([1.0 + 1.0 / 9] * 2)
        assert procedure.reference_point_correction_factor == pytest.approx((1.0 + 1.0 / 9) ** 2)

    def test_lattice_table_uses_exact_integers(self):
        sizes = Hypervolume._lattice_sizes(2)
        assert sizes[:3] == [3, 6, 10]
        assert all(isinstance(size, int) for size in sizes)

    def test_value_outside_evolution(self):
        procedure = Hypervolume()
        procedure.evolution_mode = False
        value = procedure.compute_value(np.array([[0.1, 0.1]]))
        assert value == pytest.approx(1.0 / 1.21)
