"""
Tests for Frame Rotation and State Conversion

Validates:
- local_frame/global_frame are inverse rotations
- get_conserved/get_primary are inverse conversions
- Sound speed and collision time formulas
- Gas model constants
"""

import dataclasses
import math

import pytest
import numpy as np
from ugksim.state import local_frame, global_frame, get_conserved, get_primary, sound_speed, collision_time
from ugksim.constants import GasModel, reference_viscosity, MOLECULAR_MODELS

GAMMA = 5.0 / 3.0

STATES = [
    (1.0, 0.0, 0.0, 1.0),
    (0.5, 0.3, -0.2, 2.0),
    (2.3, -1.5, 0.7, 0.4),
    (1e-3, 4.0, 4.0, 10.0),
]


class TestFrameTransform:
    """Test rotation between global and interface-local frame."""

    @pytest.mark.parametrize("angle", [0.0, 0.3, 1.2, 2.5, -2.0])
    def test_round_trip(self, angle):
        """global_frame(local_frame(w)) should return w."""
        cosx, cosy = math.cos(angle), math.sin(angle)
        w = np.array([1.2, 0.4, -0.9, 3.1])

        w_back = global_frame(local_frame(w, cosx, cosy), cosx, cosy)

        np.testing.assert_allclose(w_back, w, rtol=1e-14, atol=1e-14)

    def test_x_normal_is_identity(self):
        """A face with normal +x should not change the vector."""
        w = np.array([1.0, 2.0, 3.0, 4.0])
        np.testing.assert_array_equal(local_frame(w, 1.0, 0.0), w)

    def test_y_normal(self):
        """A face with normal +y maps (wx, wy) to (wy, -wx)."""
        w = np.array([1.0, 2.0, 3.0, 4.0])
        np.testing.assert_allclose(local_frame(w, 0.0, 1.0), [1.0, 3.0, -2.0, 4.0])

    def test_scalars_unchanged(self):
        """Components 0 and 3 are not rotated."""
        w = np.array([0.7, 1.0, 1.0, 5.5])
        w_local = local_frame(w, 0.6, 0.8)
        assert w_local[0] == w[0]
        assert w_local[3] == w[3]

    def test_preserves_vector_length(self):
        """Rotation should preserve the magnitude of the vector part."""
        w = np.array([1.0, 0.3, -0.4, 2.0])
        w_local = local_frame(w, 0.6, 0.8)
        assert abs(np.hypot(w_local[1], w_local[2]) - 0.5) < 1e-14


class TestStateConversion:
    """Test primitive <-> conservative conversion."""

    @pytest.mark.parametrize("prim", STATES)
    def test_round_trip(self, prim):
        """get_primary(get_conserved(prim)) should return prim."""
        prim = np.array(prim)
        prim_back = get_primary(get_conserved(prim, GAMMA), GAMMA)
        np.testing.assert_allclose(prim_back, prim, rtol=1e-12)

    def test_total_energy(self):
        """Energy is rho/(2 lambda (gamma-1)) + rho |u|^2 / 2."""
        prim = np.array([2.0, 1.0, -1.0, 0.5])
        w = get_conserved(prim, GAMMA)

        expected = 0.5 * 2.0 / (0.5 * (GAMMA - 1.0)) + 0.5 * 2.0 * 2.0
        assert abs(w[3] - expected) < 1e-12
        np.testing.assert_allclose(w[:3], [2.0, 2.0, -2.0])

    def test_zero_density_not_finite(self):
        """Zero density should give a non-finite state rather than an exception."""
        prim = get_primary(np.zeros(4), GAMMA)
        assert not np.all(np.isfinite(prim))

    def test_negative_internal_energy(self):
        """Kinetic energy above total energy gives negative lambda."""
        prim = get_primary(np.array([1.0, 2.0, 0.0, 1.0]), GAMMA)
        assert prim[3] < 0.0


class TestTransportProperties:
    """Test sound speed and collision time."""

    def test_sound_speed(self):
        """c = sqrt(gamma / (2 lambda))."""
        prim = np.array([1.0, 0.0, 0.0, 0.5])
        assert abs(sound_speed(prim, GAMMA) - math.sqrt(GAMMA)) < 1e-14

    def test_collision_time(self):
        """tau = 2 mu_ref lambda^(1-omega) / rho."""
        prim = np.array([2.0, 0.1, 0.0, 1.5])
        mu_ref, omega = 0.05, 0.81

        tau = collision_time(prim, mu_ref, omega)
        expected = mu_ref * 2.0 * 1.5**(1.0 - omega) / 2.0
        assert abs(tau - expected) < 1e-15

    def test_collision_time_decreases_with_density(self):
        """Denser gas should collide more often."""
        tau_low = collision_time(np.array([0.5, 0.0, 0.0, 1.0]), 0.05, 0.81)
        tau_high = collision_time(np.array([5.0, 0.0, 0.0, 1.0]), 0.05, 0.81)
        assert tau_high < tau_low


class TestGasModel:
    """Test gas constants."""

    def test_monatomic_gamma(self):
        """CK = 1 gives gamma = 5/3."""
        assert abs(GasModel(ck=1).gamma - 5.0 / 3.0) < 1e-15

    def test_reference_viscosity_hard_sphere(self):
        """Hard-sphere reference viscosity is 5 sqrt(pi)/16 Kn."""
        mu = reference_viscosity(0.075, 1.0, 0.5)
        assert abs(mu - 5.0 * math.sqrt(math.pi) / 16.0 * 0.075) < 1e-15

    def test_mu_ref_scales_with_knudsen(self):
        """Viscosity coefficient should be linear in Kn."""
        assert abs(GasModel(kn=0.2).mu_ref - 2.0 * GasModel(kn=0.1).mu_ref) < 1e-15

    def test_from_model(self):
        """Named molecular models set the reference parameters."""
        gas = GasModel.from_model('VSS', kn=0.1)
        assert gas.alpha_ref == MOLECULAR_MODELS['VSS'].alpha
        assert gas.omega_ref == MOLECULAR_MODELS['VSS'].omega

    def test_unknown_model_raises(self):
        """Unknown molecular model should raise ValueError."""
        with pytest.raises(ValueError, match="Unknown molecular model"):
            GasModel.from_model('LJ', kn=0.1)

    def test_immutable(self):
        """Gas constants cannot be changed after construction."""
        gas = GasModel()
        with pytest.raises(dataclasses.FrozenInstanceError):
            gas.kn = 1.0
