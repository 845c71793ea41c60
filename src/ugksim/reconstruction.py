"""
Slope Reconstruction of the Distribution Function

Van Leer limited slopes of h and b along one mesh direction, from the
cell and its two neighbours. The limiter is TVD: zero slope at local
extrema, close to the smaller one-sided slope in smooth regions.

Reference:
- van Leer (1974), "Towards the ultimate conservative difference scheme II"
"""

import numpy as np
from numba import njit, prange

from .constants import SMV, IDIRC, JDIRC


@njit
def van_leer_slope(f_left, f_mid, f_right, len_left, len_mid, len_right):
    """
    Van Leer limited slope of a discrete distribution.

        s = (sign(sR) + sign(sL)) |sR| |sL| / (|sR| + |sL| + SMV)

    Args:
        f_left, f_mid, f_right: Distribution in the three cells, shape (uNum, vNum)
        len_left, len_mid, len_right: Cell lengths along the direction

    Returns:
        slope: Limited slope in the middle cell, shape (uNum, vNum)
    """
    sL = (f_mid - f_left) / (0.5 * (len_mid + len_left))
    sR = (f_right - f_mid) / (0.5 * (len_right + len_mid))
    return (np.sign(sR) + np.sign(sL)) * np.abs(sR) * np.abs(sL) / (np.abs(sR) + np.abs(sL) + SMV)


@njit
def reconstruct_cell(h, b, sh, sb, length, i, j, idx):
    """
    Store the limited slopes of cell (i, j) along direction idx.

    Args:
        h, b: Distribution function of all cells, shape (nx+2, ny+2, uNum, vNum)
        sh, sb: Slopes of all cells, shape (nx+2, ny+2, uNum, vNum, 2), written in-place
        length: Cell lengths, shape (nx+2, ny+2, 2)
        i, j: Index of the middle cell
        idx: IDIRC or JDIRC
    """
    if idx == IDIRC:
        il, jl, ir, jr = i - 1, j, i + 1, j
    else:
        il, jl, ir, jr = i, j - 1, i, j + 1

    sh[i, j, :, :, idx] = van_leer_slope(h[il, jl], h[i, j], h[ir, jr],
                                         length[il, jl, idx], length[i, j, idx], length[ir, jr, idx])
    sb[i, j, :, :, idx] = van_leer_slope(b[il, jl], b[i, j], b[ir, jr],
                                         length[il, jl, idx], length[i, j, idx], length[ir, jr, idx])


@njit(parallel=True)
def reconstruct_i(h, b, sh, sb, length):
    """
    Reconstruct slopes along i for all interior cells.

    Ghost cells (first and last index) only serve as neighbours.
    Cells are independent, so the sweep runs in parallel.
    """
    nx = h.shape[0] - 2
    ny = h.shape[1] - 2
    for i in prange(1, nx + 1):
        for j in range(1, ny + 1):
            reconstruct_cell(h, b, sh, sb, length, i, j, IDIRC)


@njit(parallel=True)
def reconstruct_j(h, b, sh, sb, length):
    """Reconstruct slopes along j for all interior cells."""
    nx = h.shape[0] - 2
    ny = h.shape[1] - 2
    for i in prange(1, nx + 1):
        for j in range(1, ny + 1):
            reconstruct_cell(h, b, sh, sb, length, i, j, JDIRC)


def reconstruct(field):
    """
    Reconstruct slopes of a FlowField in both directions.

    Must complete before any interface flux is evaluated.
    """
    reconstruct_i(field.h, field.b, field.sh, field.sb, field.length)
    reconstruct_j(field.h, field.b, field.sh, field.sb, field.length)
