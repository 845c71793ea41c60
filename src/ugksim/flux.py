"""
Interface Flux of the Unified Gas-Kinetic Scheme

For each cell interface the scheme evaluates the time integral over one
step of the local kinetic solution

    f(t) = (1 - e^{-t/τ}) g⁺ + ... + e^{-t/τ} f₀(x - u t)

where g⁺ is the (Shakhov) equilibrium built from the interface state and
its Chapman-Enskog expansion, and f₀ is the reconstructed initial
distribution. The result is the flux of the conservative variables and
of the discrete distribution functions h, b.

Work is done in the interface-local frame (normal, tangential); the
conservative flux is rotated back to the global frame at the end.

Reference:
- Xu & Huang (2010), "A unified gas-kinetic scheme for continuum and
  rarefied flows", J. Comput. Phys. 229
- Huang, Xu & Yu (2012), "A unified gas-kinetic scheme for continuum and
  rarefied flows II: multi-dimensional cases", Commun. Comput. Phys. 12
"""

import math

import numpy as np
from numba import njit, prange

from .constants import PI, IDIRC, JDIRC
from .state import local_frame, global_frame, get_primary, collision_time
from .distribution import discrete_maxwell, heat_flux, shakhov_part
from .moments import calc_moment, moment_uvxi, moment_auvxi


# ==================== MICRO SLOPE AND TIME WEIGHTS ====================

@njit(error_model='numpy')
def micro_slope(prim, sw, ck):
    """
    Micro slope of the Maxwellian from a slope of conservative variables.

    Solves <a ψ> ρ = sw for a = (a1, a2, a3, a4) with a·ψ = a1 + a2 u +
    a3 v + 0.5 a4 (u² + v² + ξ²). The solve runs back to front: a4 first,
    then a3 and a2 which depend on a4, then a1.

    Args:
        prim: Primitive variables (rho, U, V, lambda)
        sw: Spatial or temporal slope of conservative variables
        ck: Internal degrees of freedom

    Returns:
        a: Micro slope, shape (4,)
    """
    rho, U, V, lam = prim[0], prim[1], prim[2], prim[3]

    a = np.empty(4)
    a[3] = 4.0 * lam**2 / ((ck + 2) * rho) * (
        2.0 * sw[3] - 2.0 * U * sw[1] - 2.0 * V * sw[2]
        + sw[0] * (U**2 + V**2 - 0.5 * (ck + 2) / lam))
    a[2] = 2.0 * lam / rho * (sw[2] - V * sw[0]) - V * a[3]
    a[1] = 2.0 * lam / rho * (sw[1] - U * sw[0]) - U * a[3]
    a[0] = sw[0] / rho - U * a[1] - V * a[2] - 0.5 * (U**2 + V**2 + 0.5 * (ck + 2) / lam) * a[3]
    return a


@njit(error_model='numpy')
def time_integration_weights(tau, dt):
    """
    Time integration coefficients of the kinetic solution over [0, dt].

        Mt4 = τ(1 - e^{-dt/τ})
        Mt5 = -τ dt e^{-dt/τ} + τ Mt4
        Mt1 = dt - Mt4
        Mt2 = -τ Mt1 + Mt5
        Mt3 = 0.5 dt² - τ Mt1

    Returns:
        Mt: (Mt1, Mt2, Mt3, Mt4, Mt5)
    """
    Mt = np.empty(5)
    Mt[3] = tau * (1.0 - math.exp(-dt / tau))
    Mt[4] = -tau * dt * math.exp(-dt / tau) + tau * Mt[3]
    Mt[0] = dt - Mt[3]
    Mt[1] = -tau * Mt[0] + Mt[4]
    Mt[2] = 0.5 * dt**2 - tau * Mt[0]
    return Mt


@njit(error_model='numpy')
def heaviside(vn):
    """Step function: 1 where vn >= 0, else 0."""
    delta = np.zeros_like(vn)
    for k in range(vn.shape[0]):
        for m in range(vn.shape[1]):
            if vn[k, m] >= 0.0:
                delta[k, m] = 1.0
    return delta


@njit(error_model='numpy')
def _expand_h(a, vn, vt, H, B):
    """(a·ψ) acting on the translational Maxwellian."""
    return a[0] * H + a[1] * vn * H + a[2] * vt * H + 0.5 * a[3] * ((vn**2 + vt**2) * H + B)


@njit(error_model='numpy')
def _expand_b(a, vn, vt, H, B, xi4):
    """(a·ψ) acting on the internal-energy Maxwellian."""
    return a[0] * B + a[1] * vn * B + a[2] * vt * B + 0.5 * a[3] * ((vn**2 + vt**2) * B + xi4 * H)


# ==================== INTERIOR INTERFACE ====================

@njit(error_model='numpy')
def calc_flux(h_l, b_l, sh_l, sb_l, w_l, len_l,
              h_r, b_r, sh_r, sb_r, w_r, len_r,
              cosx, cosy, face_len,
              u_space, v_space, weight,
              dt, ck, gamma, pr, mu_ref, omega):
    """
    Flux across one interior interface.

    Args:
        h_l, b_l: Distribution function of the left cell, shape (uNum, vNum)
        sh_l, sb_l: Slopes of the left cell along the face direction
        w_l: Conservative variables of the left cell (global frame)
        len_l: Length of the left cell along the face direction
        h_r, b_r, sh_r, sb_r, w_r, len_r: Same for the right cell
        cosx, cosy: Directional cosines of the face normal
        face_len: Length of the interface
        u_space, v_space, weight: Discrete velocity grid
        dt: Time step
        ck, gamma, pr, mu_ref, omega: Gas constants

    Returns:
        flux: Conservative flux over dt (global frame, times face length)
        flux_h, flux_b: Flux of distribution function, shape (uNum, vNum)
    """
    # Micro velocity in local frame
    vn = u_space * cosx + v_space * cosy
    vt = -u_space * cosy + v_space * cosx
    v2 = vn**2 + vt**2

    delta = heaviside(vn)

    # Upwind reconstruction of the initial distribution at the interface
    h = (h_l + 0.5 * len_l * sh_l) * delta + (h_r - 0.5 * len_r * sh_r) * (1.0 - delta)
    b = (b_l + 0.5 * len_l * sb_l) * delta + (b_r - 0.5 * len_r * sb_r) * (1.0 - delta)
    sh = sh_l * delta + sh_r * (1.0 - delta)
    sb = sb_l * delta + sb_r * (1.0 - delta)

    # Conservative variables at the interface
    w = np.empty(4)
    w[0] = np.sum(weight * h)
    w[1] = np.sum(weight * vn * h)
    w[2] = np.sum(weight * vt * h)
    w[3] = 0.5 * (np.sum(weight * v2 * h) + np.sum(weight * b))

    prim = get_primary(w, gamma)

    # Spatial micro slopes
    sw = (w - local_frame(w_l, cosx, cosy)) / (0.5 * len_l)
    aL = micro_slope(prim, sw, ck)

    sw = (local_frame(w_r, cosx, cosy) - w) / (0.5 * len_r)
    aR = micro_slope(prim, sw, ck)

    # Temporal micro slope from the compatibility condition
    Mu, Mv, Mxi, MuL, MuR = calc_moment(prim, ck)

    MauL = moment_auvxi(aL, MuL, Mv, Mxi, 1, 0)
    MauR = moment_auvxi(aR, MuR, Mv, Mxi, 1, 0)

    sw = -prim[0] * (MauL + MauR)
    aT = micro_slope(prim, sw, ck)

    tau = collision_time(prim, mu_ref, omega)
    Mt = time_integration_weights(tau, dt)

    # Flux from the equilibrium part
    Mau0 = moment_uvxi(Mu, Mv, Mxi, 1, 0, 0)
    MauL = moment_auvxi(aL, MuL, Mv, Mxi, 2, 0)
    MauR = moment_auvxi(aR, MuR, Mv, Mxi, 2, 0)
    MauT = moment_auvxi(aT, Mu, Mv, Mxi, 1, 0)

    flux = Mt[0] * prim[0] * Mau0 + Mt[1] * prim[0] * (MauL + MauR) + Mt[2] * prim[0] * MauT

    # Flux from the Shakhov part and the initial distribution
    H0, B0 = discrete_maxwell(vn, vt, prim, ck)
    qf = heat_flux(h, b, vn, vt, prim, weight)
    H_plus, B_plus = shakhov_part(H0, B0, vn, vt, qf, prim, ck, pr)

    flux[0] += (Mt[0] * np.sum(weight * vn * H_plus)
                + Mt[3] * np.sum(weight * vn * h)
                - Mt[4] * np.sum(weight * vn**2 * sh))
    flux[1] += (Mt[0] * np.sum(weight * vn**2 * H_plus)
                + Mt[3] * np.sum(weight * vn**2 * h)
                - Mt[4] * np.sum(weight * vn**3 * sh))
    flux[2] += (Mt[0] * np.sum(weight * vt * vn * H_plus)
                + Mt[3] * np.sum(weight * vt * vn * h)
                - Mt[4] * np.sum(weight * vt * vn**2 * sh))
    flux[3] += (Mt[0] * 0.5 * (np.sum(weight * vn * v2 * H_plus) + np.sum(weight * vn * B_plus))
                + Mt[3] * 0.5 * (np.sum(weight * vn * v2 * h) + np.sum(weight * vn * b))
                - Mt[4] * 0.5 * (np.sum(weight * vn**2 * v2 * sh) + np.sum(weight * vn**2 * sb)))

    # Flux of distribution function
    flux_h = (Mt[0] * vn * (H0 + H_plus)
              + Mt[1] * vn**2 * _expand_h(aL, vn, vt, H0, B0) * delta
              + Mt[1] * vn**2 * _expand_h(aR, vn, vt, H0, B0) * (1.0 - delta)
              + Mt[2] * vn * _expand_h(aT, vn, vt, H0, B0)
              + Mt[3] * vn * h - Mt[4] * vn**2 * sh)

    flux_b = (Mt[0] * vn * (B0 + B_plus)
              + Mt[1] * vn**2 * _expand_b(aL, vn, vt, H0, B0, Mxi[2]) * delta
              + Mt[1] * vn**2 * _expand_b(aR, vn, vt, H0, B0, Mxi[2]) * (1.0 - delta)
              + Mt[2] * vn * _expand_b(aT, vn, vt, H0, B0, Mxi[2])
              + Mt[3] * vn * b - Mt[4] * vn**2 * sb)

    flux = global_frame(flux, cosx, cosy)

    return face_len * flux, face_len * flux_h, face_len * flux_b


# ==================== DIFFUSE WALL ====================

@njit(error_model='numpy')
def calc_flux_boundary(bc, h_c, b_c, sh_c, sb_c, len_c,
                       cosx, cosy, face_len, rot,
                       u_space, v_space, weight, dt, ck):
    """
    Flux across a fully diffuse wall.

    Molecules leaving the wall follow a Maxwellian with the wall velocity
    and temperature; its density makes the net mass flux vanish.

    Args:
        bc: Wall primitive state (rho, u, v, lambda) in global frame
        h_c, b_c: Distribution function of the adjacent cell
        sh_c, sb_c: Slopes of the adjacent cell along the face direction
        len_c: Length of the adjacent cell along the face direction
        cosx, cosy: Directional cosines of the face normal
        face_len: Length of the interface
        rot: +1 if the cell lies on the positive side of the face, else -1
        u_space, v_space, weight: Discrete velocity grid
        dt: Time step
        ck: Internal degrees of freedom

    Returns:
        flux, flux_h, flux_b as in calc_flux()
    """
    vn = u_space * cosx + v_space * cosy
    vt = -u_space * cosy + v_space * cosx
    v2 = vn**2 + vt**2

    # 1 for molecules emitted by the wall
    delta = heaviside(vn * rot)

    prim = local_frame(bc, cosx, cosy)

    # Gas side distribution at the wall
    h = h_c - rot * 0.5 * len_c * sh_c
    b = b_c - rot * 0.5 * len_c * sb_c

    # Wall density from zero mass flux
    SF = np.sum(weight * vn * h * (1.0 - delta))
    SG = prim[3] / PI * np.sum(weight * vn * np.exp(-prim[3] * ((vn - prim[1])**2 + (vt - prim[2])**2)) * delta)
    prim[0] = -SF / SG

    H0, B0 = discrete_maxwell(vn, vt, prim, ck)

    h = H0 * delta + h * (1.0 - delta)
    b = B0 * delta + b * (1.0 - delta)
    sh = sh_c * (1.0 - delta)
    sb = sb_c * (1.0 - delta)

    flux = np.empty(4)
    flux[0] = dt * np.sum(weight * vn * h) - 0.5 * dt**2 * np.sum(weight * vn**2 * sh)
    flux[1] = dt * np.sum(weight * vn**2 * h) - 0.5 * dt**2 * np.sum(weight * vn**3 * sh)
    flux[2] = dt * np.sum(weight * vt * vn * h) - 0.5 * dt**2 * np.sum(weight * vt * vn**2 * sh)
    flux[3] = (dt * 0.5 * (np.sum(weight * vn * v2 * h) + np.sum(weight * vn * b))
               - 0.5 * dt**2 * 0.5 * (np.sum(weight * vn**2 * v2 * sh) + np.sum(weight * vn**2 * sb)))

    flux_h = vn * h * dt - 0.5 * vn**2 * sh * dt**2
    flux_b = vn * b * dt - 0.5 * vn**2 * sb * dt**2

    flux = global_frame(flux, cosx, cosy)

    return face_len * flux, face_len * flux_h, face_len * flux_b


# ==================== SWEEPS ====================

@njit(parallel=True, error_model='numpy')
def compute_fluxes_i(h, b, sh, sb, w, length,
                     face_len, face_cosx, face_cosy, flux, flux_h, flux_b,
                     u_space, v_space, weight, dt, ck, gamma, pr, mu_ref, omega,
                     i_start, i_stop):
    """
    Fluxes across vertical faces i_start <= i < i_stop.

    Vertical face (i, j) separates cell (i, j+1) and cell (i+1, j+1) of the
    ghost-padded cell arrays. Each face owns its output slot, so faces are
    evaluated in parallel.
    """
    ny = h.shape[1] - 2
    for i in prange(i_start, i_stop):
        for j in range(ny):
            f, fh, fb = calc_flux(
                h[i, j + 1], b[i, j + 1], sh[i, j + 1, :, :, IDIRC], sb[i, j + 1, :, :, IDIRC],
                w[i, j + 1], length[i, j + 1, IDIRC],
                h[i + 1, j + 1], b[i + 1, j + 1], sh[i + 1, j + 1, :, :, IDIRC], sb[i + 1, j + 1, :, :, IDIRC],
                w[i + 1, j + 1], length[i + 1, j + 1, IDIRC],
                face_cosx[i, j], face_cosy[i, j], face_len[i, j],
                u_space, v_space, weight, dt, ck, gamma, pr, mu_ref, omega)
            flux[i, j] = f
            flux_h[i, j] = fh
            flux_b[i, j] = fb


@njit(parallel=True, error_model='numpy')
def compute_fluxes_j(h, b, sh, sb, w, length,
                     face_len, face_cosx, face_cosy, flux, flux_h, flux_b,
                     u_space, v_space, weight, dt, ck, gamma, pr, mu_ref, omega,
                     j_start, j_stop):
    """
    Fluxes across horizontal faces j_start <= j < j_stop.

    Horizontal face (i, j) separates cell (i+1, j) and cell (i+1, j+1).
    """
    nx = h.shape[0] - 2
    for i in prange(nx):
        for j in range(j_start, j_stop):
            f, fh, fb = calc_flux(
                h[i + 1, j], b[i + 1, j], sh[i + 1, j, :, :, JDIRC], sb[i + 1, j, :, :, JDIRC],
                w[i + 1, j], length[i + 1, j, JDIRC],
                h[i + 1, j + 1], b[i + 1, j + 1], sh[i + 1, j + 1, :, :, JDIRC], sb[i + 1, j + 1, :, :, JDIRC],
                w[i + 1, j + 1], length[i + 1, j + 1, JDIRC],
                face_cosx[i, j], face_cosy[i, j], face_len[i, j],
                u_space, v_space, weight, dt, ck, gamma, pr, mu_ref, omega)
            flux[i, j] = f
            flux_h[i, j] = fh
            flux_b[i, j] = fb


@njit(error_model='numpy')
def compute_wall_fluxes_i(bc_w, bc_e, h, b, sh, sb, length,
                          face_len, face_cosx, face_cosy, flux, flux_h, flux_b,
                          u_space, v_space, weight, dt, ck):
    """Diffuse-wall fluxes on the west (i = 0) and east (i = nx) faces."""
    nx = h.shape[0] - 2
    ny = h.shape[1] - 2
    for j in range(ny):
        f, fh, fb = calc_flux_boundary(
            bc_w, h[1, j + 1], b[1, j + 1], sh[1, j + 1, :, :, IDIRC], sb[1, j + 1, :, :, IDIRC],
            length[1, j + 1, IDIRC], face_cosx[0, j], face_cosy[0, j], face_len[0, j], 1.0,
            u_space, v_space, weight, dt, ck)
        flux[0, j] = f
        flux_h[0, j] = fh
        flux_b[0, j] = fb

        f, fh, fb = calc_flux_boundary(
            bc_e, h[nx, j + 1], b[nx, j + 1], sh[nx, j + 1, :, :, IDIRC], sb[nx, j + 1, :, :, IDIRC],
            length[nx, j + 1, IDIRC], face_cosx[nx, j], face_cosy[nx, j], face_len[nx, j], -1.0,
            u_space, v_space, weight, dt, ck)
        flux[nx, j] = f
        flux_h[nx, j] = fh
        flux_b[nx, j] = fb


@njit(error_model='numpy')
def compute_wall_fluxes_j(bc_s, bc_n, h, b, sh, sb, length,
                          face_len, face_cosx, face_cosy, flux, flux_h, flux_b,
                          u_space, v_space, weight, dt, ck):
    """Diffuse-wall fluxes on the south (j = 0) and north (j = ny) faces."""
    nx = h.shape[0] - 2
    ny = h.shape[1] - 2
    for i in range(nx):
        f, fh, fb = calc_flux_boundary(
            bc_s, h[i + 1, 1], b[i + 1, 1], sh[i + 1, 1, :, :, JDIRC], sb[i + 1, 1, :, :, JDIRC],
            length[i + 1, 1, JDIRC], face_cosx[i, 0], face_cosy[i, 0], face_len[i, 0], 1.0,
            u_space, v_space, weight, dt, ck)
        flux[i, 0] = f
        flux_h[i, 0] = fh
        flux_b[i, 0] = fb

        f, fh, fb = calc_flux_boundary(
            bc_n, h[i + 1, ny], b[i + 1, ny], sh[i + 1, ny, :, :, JDIRC], sb[i + 1, ny, :, :, JDIRC],
            length[i + 1, ny, JDIRC], face_cosx[i, ny], face_cosy[i, ny], face_len[i, ny], -1.0,
            u_space, v_space, weight, dt, ck)
        flux[i, ny] = f
        flux_h[i, ny] = fh
        flux_b[i, ny] = fb
