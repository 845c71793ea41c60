"""
Tests for Discrete Velocity Space

Validates:
- Composite Newton-Cotes rule (point count, exactness)
- Gauss-Hermite rule with exp(x^2) weights
- Read-only tensor-product grid
"""

import logging
import math

import pytest
import numpy as np
from ugksim.velocity_space import (
    VelocityGrid,
    newton_cotes_1d,
    gauss_hermite_1d,
    newton_cotes_grid,
    gauss_hermite_grid,
)


class TestNewtonCotes:
    """Test composite closed Newton-Cotes quadrature."""

    def test_weights_sum_to_interval(self):
        """Weights should integrate a constant exactly."""
        nodes, weights = newton_cotes_1d(-6.0, 6.0, 41)
        assert abs(np.sum(weights) - 12.0) < 1e-12

    def test_point_count_kept(self):
        """k*order + 1 points are used as requested."""
        nodes, weights = newton_cotes_1d(-1.0, 1.0, 21, order=4)
        assert len(nodes) == 21
        assert nodes[0] == -1.0 and nodes[-1] == 1.0

    def test_point_count_raised(self, caplog):
        """Other point counts are raised to the next k*order + 1, with a warning."""
        with caplog.at_level(logging.WARNING, logger="ugksim.velocity_space"):
            nodes, weights = newton_cotes_1d(-15.0, 15.0, 64, order=4)

        assert len(nodes) == 65
        assert len(weights) == 65
        assert "raised from 64 to 65" in caplog.text

    def test_boole_exact_for_quintic(self):
        """Boole's rule integrates polynomials up to degree 5 exactly."""
        nodes, weights = newton_cotes_1d(-1.0, 2.0, 13, order=4)
        f = nodes**5 - 2.0 * nodes**4 + nodes
        exact = (2.0**6 - 1.0) / 6.0 - 2.0 * (2.0**5 + 1.0) / 5.0 + (4.0 - 1.0) / 2.0
        assert abs(np.sum(weights * f) - exact) < 1e-12

    def test_gaussian_integral(self):
        """A Gaussian inside the box should be integrated to high accuracy."""
        nodes, weights = newton_cotes_1d(-8.0, 8.0, 161)
        integral = np.sum(weights * np.exp(-nodes**2))
        assert abs(integral - math.sqrt(math.pi)) < 1e-12

    def test_empty_interval_raises(self):
        with pytest.raises(ValueError, match="Empty velocity interval"):
            newton_cotes_1d(1.0, 1.0, 21)

    def test_too_few_points_raises(self):
        with pytest.raises(ValueError, match="at least 5 points"):
            newton_cotes_1d(-1.0, 1.0, 3)


class TestGaussHermite:
    """Test Gauss-Hermite quadrature with exp(x^2) weights."""

    def test_integrates_gaussian(self):
        """Plain weighted sum of exp(-x^2) gives sqrt(pi)."""
        nodes, weights = gauss_hermite_1d(28)
        assert abs(np.sum(weights * np.exp(-nodes**2)) - math.sqrt(math.pi)) < 1e-10

    def test_scaled_second_moment(self):
        """Second moment of a Maxwellian with lambda = 1 is 1/2."""
        nodes, weights = gauss_hermite_1d(28, scale=1.0)
        f = np.exp(-nodes**2) / math.sqrt(math.pi)
        assert abs(np.sum(weights * nodes**2 * f) - 0.5) < 1e-10

    def test_scale_stretches_nodes(self):
        nodes1, _ = gauss_hermite_1d(10, scale=1.0)
        nodes2, _ = gauss_hermite_1d(10, scale=2.0)
        np.testing.assert_allclose(nodes2, 2.0 * nodes1)


class TestVelocityGrid:
    """Test the tensor-product grid."""

    def test_shapes(self):
        grid = newton_cotes_grid((-6, 6), 41, (-5, 5), 21)
        assert grid.shape == (41, 21)
        assert grid.u_space.shape == (41, 21)
        assert grid.weight.shape == (41, 21)

    def test_ij_layout(self):
        """First index runs along u, second along v."""
        grid = newton_cotes_grid((-6, 6), 41, (-5, 5), 21)
        assert np.all(np.diff(grid.u_space[:, 0]) > 0)
        assert np.all(grid.u_space[:, 0] == grid.u_space[:, -1])
        assert np.all(np.diff(grid.v_space[0, :]) > 0)

    def test_max_velocity(self):
        grid = newton_cotes_grid((-6, 6), 41, (-5, 5), 21)
        assert grid.u_max == 6.0
        assert grid.v_max == 5.0

    def test_integrate_area(self):
        """Integral of 1 over the box is its area."""
        grid = newton_cotes_grid((-6, 6), 41, (-5, 5), 21)
        assert abs(np.sum(grid.weight) - 120.0) < 1e-10

    def test_gauss_hermite_grid_normalization(self):
        """2D Maxwellian at rest integrates to one."""
        grid = gauss_hermite_grid(20, 20)
        f = np.exp(-(grid.u_space**2 + grid.v_space**2)) / math.pi
        assert abs(np.sum(grid.weight * f) - 1.0) < 1e-10

    def test_read_only(self):
        """Grid arrays are shared and must not be modified."""
        grid = newton_cotes_grid((-6, 6), 41, (-6, 6), 41)
        with pytest.raises(ValueError):
            grid.weight[0, 0] = 1.0

    def test_size_mismatch_raises(self):
        with pytest.raises(ValueError, match="equal size"):
            VelocityGrid(np.zeros(5), np.zeros(5), np.zeros(4), np.zeros(5))
