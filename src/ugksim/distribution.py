"""
Discrete Equilibrium Distributions

Reduced distribution functions on the discrete velocity grid:
    H = ∫ g dξ            (translational part)
    B = ∫ ξ² g dξ         (internal energy part)

The Shakhov model adds a heat-flux correction to the Maxwellian so that
the Prandtl number of the BGK model can be set freely.

Reference:
- Shakhov (1968), "Generalization of the Krook kinetic relaxation equation"
- Xu & Huang (2010), "A unified gas-kinetic scheme for continuum and
  rarefied flows", J. Comput. Phys. 229
"""

import numpy as np
from numba import njit

from .constants import PI


@njit(error_model='numpy')
def discrete_maxwell(vn, vt, prim, ck):
    """
    Discretized Maxwellian distribution in reduced form.

        H = rho * (lambda/pi) * exp(-lambda*((vn-u)^2 + (vt-v)^2))
        B = H * CK / (2*lambda)

    Args:
        vn, vt: Normal and tangential micro velocity, shape (uNum, vNum)
        prim: Primitive variables in the same frame as vn, vt
        ck: Internal degrees of freedom

    Returns:
        H, B: Reduced Maxwellian, shape (uNum, vNum)
    """
    H = prim[0] * (prim[3] / PI) * np.exp(-prim[3] * ((vn - prim[1])**2 + (vt - prim[2])**2))
    B = H * ck / (2.0 * prim[3])
    return H, B


@njit(error_model='numpy')
def heat_flux(h, b, vn, vt, prim, weight):
    """
    Heat flux of a distribution in normal and tangential direction.

    Args:
        h, b: Reduced distribution function, shape (uNum, vNum)
        vn, vt: Normal and tangential micro velocity
        prim: Primitive variables in the same frame
        weight: Quadrature weights

    Returns:
        qf: (q_n, q_t)
    """
    cn = vn - prim[1]
    ct = vt - prim[2]
    c2 = cn**2 + ct**2

    qf = np.empty(2)
    qf[0] = 0.5 * (np.sum(weight * cn * c2 * h) + np.sum(weight * cn * b))
    qf[1] = 0.5 * (np.sum(weight * ct * c2 * h) + np.sum(weight * ct * b))
    return qf


@njit(error_model='numpy')
def shakhov_part(H, B, vn, vt, qf, prim, ck, pr):
    """
    Shakhov correction H^+, B^+ of the equilibrium distribution.

        H+ = 0.8(1-Pr) λ²/ρ (c·q) (2λc² + CK - 5) H
        B+ = 0.8(1-Pr) λ²/ρ (c·q) (2λc² + CK - 3) B

    with c the peculiar velocity and q the heat flux.

    Args:
        H, B: Reduced Maxwellian
        vn, vt: Normal and tangential micro velocity
        qf: Heat flux (q_n, q_t)
        prim: Primitive variables
        ck: Internal degrees of freedom
        pr: Prandtl number

    Returns:
        H_plus, B_plus: Shakhov parts, shape (uNum, vNum)
    """
    cn = vn - prim[1]
    ct = vt - prim[2]
    c2 = cn**2 + ct**2
    coef = 0.8 * (1.0 - pr) * prim[3]**2 / prim[0] * (cn * qf[0] + ct * qf[1])

    H_plus = coef * (2.0 * prim[3] * c2 + ck - 5.0) * H
    B_plus = coef * (2.0 * prim[3] * c2 + ck - 3.0) * B
    return H_plus, B_plus
