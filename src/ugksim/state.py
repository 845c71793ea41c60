"""
Macroscopic State Conversion and Frame Transforms

Primitive state:    prim = (rho, u, v, lambda),  lambda = 1/(2RT)
Conservative state: w    = (rho, rho*u, rho*v, rhoE)

Interface-local frame: first velocity component along the face normal,
second along the tangent. All functions are Numba-compiled so they can be
called from the flux kernels.
"""

import math

import numpy as np
from numba import njit


# ==================== FRAME TRANSFORM ====================

@njit(error_model='numpy')
def local_frame(w, cosx, cosy):
    """
    Rotate a macroscopic 4-vector from the global frame to the local frame.

    Args:
        w: Macroscopic variables in global frame, shape (4,)
        cosx, cosy: Directional cosines of the face normal

    Returns:
        w_local: Macroscopic variables in local frame, shape (4,)
    """
    w_local = np.empty(4)
    w_local[0] = w[0]
    w_local[1] = w[1] * cosx + w[2] * cosy
    w_local[2] = -w[1] * cosy + w[2] * cosx
    w_local[3] = w[3]
    return w_local


@njit(error_model='numpy')
def global_frame(w, cosx, cosy):
    """
    Rotate a macroscopic 4-vector from the local frame back to the global frame.

    Exact inverse of local_frame() for cosx^2 + cosy^2 = 1.
    """
    w_global = np.empty(4)
    w_global[0] = w[0]
    w_global[1] = w[1] * cosx - w[2] * cosy
    w_global[2] = w[1] * cosy + w[2] * cosx
    w_global[3] = w[3]
    return w_global


# ==================== STATE CONVERSION ====================

@njit(error_model='numpy')
def get_conserved(prim, gamma):
    """
    Convert primitive variables to conservative variables.

    Args:
        prim: (rho, u, v, lambda)
        gamma: Ratio of specific heats

    Returns:
        w: (rho, rho*u, rho*v, rhoE)
    """
    w = np.empty(4)
    w[0] = prim[0]
    w[1] = prim[0] * prim[1]
    w[2] = prim[0] * prim[2]
    w[3] = 0.5 * prim[0] / (prim[3] * (gamma - 1.0)) + 0.5 * prim[0] * (prim[1]**2 + prim[2]**2)
    return w


@njit(error_model='numpy')
def get_primary(w, gamma):
    """
    Convert conservative variables to primitive variables.

    Non-positive density or internal energy yields a non-finite or
    negative lambda; the caller decides whether that is fatal.
    """
    prim = np.empty(4)
    prim[0] = w[0]
    prim[1] = w[1] / w[0]
    prim[2] = w[2] / w[0]
    prim[3] = 0.5 * w[0] / ((gamma - 1.0) * (w[3] - 0.5 * (w[1]**2 + w[2]**2) / w[0]))
    return prim


@njit(error_model='numpy')
def sound_speed(prim, gamma):
    """Speed of sound sqrt(gamma*R*T) = sqrt(0.5*gamma/lambda)."""
    return math.sqrt(0.5 * gamma / prim[3])


@njit(error_model='numpy')
def collision_time(prim, mu_ref, omega):
    """
    Collision time tau = mu/p for a power-law viscosity.

    Args:
        prim: (rho, u, v, lambda)
        mu_ref: Viscosity coefficient in reference state
        omega: Temperature dependence index

    Returns:
        tau: Collision time
    """
    return mu_ref * 2.0 * prim[3]**(1.0 - omega) / prim[0]
