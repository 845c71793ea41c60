"""
Analytic Velocity Moments of the Maxwellian

All moments are normalized by density, e.g. <u^n> = ∫ u^n g du / ρ, and
are evaluated in closed form from the primitive state. Half-range moments
of the normal velocity are seeded by the complementary error function:

    <u^0>_{>0} = 0.5 erfc(-sqrt(λ) U)
    <u^1>_{>0} = U <u^0>_{>0} + 0.5 exp(-λU²) / sqrt(πλ)
    <u^n>      = U <u^{n-1}> + 0.5 (n-1) <u^{n-2}> / λ

ψ = (1, u, v, 0.5(u² + v² + ξ²)) is the vector of collision invariants.
"""

import math

import numpy as np
from numba import njit

from .constants import PI, MNUM, MTUM


@njit(error_model='numpy')
def calc_moment(prim, ck):
    """
    Moments of normal velocity, tangential velocity and internal energy.

    Args:
        prim: Primitive variables in local frame (rho, U, V, lambda)
        ck: Internal degrees of freedom

    Returns:
        Mu: <u^n>, shape (MNUM+1,)
        Mv: <v^m>, shape (MTUM+1,)
        Mxi: <ξ^0>, <ξ^2>, <ξ^4>
        MuL: <u^n>_{>0}, shape (MNUM+1,)
        MuR: <u^n>_{<0}, shape (MNUM+1,)
    """
    U = prim[1]
    V = prim[2]
    lam = prim[3]

    MuL = np.empty(MNUM + 1)
    MuR = np.empty(MNUM + 1)
    Mv = np.empty(MTUM + 1)
    Mxi = np.empty(3)

    # Normal velocity, half range
    MuL[0] = 0.5 * math.erfc(-math.sqrt(lam) * U)
    MuL[1] = U * MuL[0] + 0.5 * math.exp(-lam * U**2) / math.sqrt(PI * lam)
    MuR[0] = 0.5 * math.erfc(math.sqrt(lam) * U)
    MuR[1] = U * MuR[0] - 0.5 * math.exp(-lam * U**2) / math.sqrt(PI * lam)

    for i in range(2, MNUM + 1):
        MuL[i] = U * MuL[i - 1] + 0.5 * (i - 1) * MuL[i - 2] / lam
        MuR[i] = U * MuR[i - 1] + 0.5 * (i - 1) * MuR[i - 2] / lam

    Mu = MuL + MuR

    # Tangential velocity, full range only
    Mv[0] = 1.0
    Mv[1] = V
    for i in range(2, MTUM + 1):
        Mv[i] = V * Mv[i - 1] + 0.5 * (i - 1) * Mv[i - 2] / lam

    # Internal degrees of freedom
    Mxi[0] = 1.0
    Mxi[1] = 0.5 * ck / lam
    Mxi[2] = ck * (ck + 2.0) / (4.0 * lam**2)

    return Mu, Mv, Mxi, MuL, MuR


@njit(error_model='numpy')
def moment_uvxi(Mu, Mv, Mxi, alpha, beta, delta):
    """
    Moment <u^α v^β ξ^δ ψ>.

    Args:
        Mu, Mv, Mxi: Moment tables from calc_moment()
        alpha, beta: Exponents of u and v
        delta: Exponent of ξ (0 or 2)

    Returns:
        Four-component moment
    """
    m = np.empty(4)
    xi = Mxi[delta // 2]
    m[0] = Mu[alpha] * Mv[beta] * xi
    m[1] = Mu[alpha + 1] * Mv[beta] * xi
    m[2] = Mu[alpha] * Mv[beta + 1] * xi
    m[3] = 0.5 * (Mu[alpha + 2] * Mv[beta] * xi
                  + Mu[alpha] * Mv[beta + 2] * xi
                  + Mu[alpha] * Mv[beta] * Mxi[(delta + 2) // 2])
    return m


@njit(error_model='numpy')
def moment_auvxi(a, Mu, Mv, Mxi, alpha, beta):
    """
    Moment <a u^α v^β ψ> for a micro slope a = (a1, a2, a3, a4),

        a·ψ = a1 + a2 u + a3 v + 0.5 a4 (u² + v² + ξ²)
    """
    return (a[0] * moment_uvxi(Mu, Mv, Mxi, alpha, beta, 0)
            + a[1] * moment_uvxi(Mu, Mv, Mxi, alpha + 1, beta, 0)
            + a[2] * moment_uvxi(Mu, Mv, Mxi, alpha, beta + 1, 0)
            + 0.5 * a[3] * moment_uvxi(Mu, Mv, Mxi, alpha + 2, beta, 0)
            + 0.5 * a[3] * moment_uvxi(Mu, Mv, Mxi, alpha, beta + 2, 0)
            + 0.5 * a[3] * moment_uvxi(Mu, Mv, Mxi, alpha, beta, 2))
