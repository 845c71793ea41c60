"""
Flow Field Storage for the UGKS

Uses Structure-of-Arrays (SoA) layout: every per-cell quantity of the
ghost-padded mesh lives in one dense array, so Numba sweeps read and
write contiguous memory and each cell/interface owns a disjoint slot.

Cell arrays (index (i, j), ghost ring at 0 and nx+1 / ny+1):
    w       conservative variables, shape (nx+2, ny+2, 4)
    h, b    distribution function, shape (nx+2, ny+2, uNum, vNum)
    sh, sb  slopes in i and j direction, shape (nx+2, ny+2, uNum, vNum, 2)
"""

import numpy as np
from numba import njit, prange

from .distribution import discrete_maxwell
from .state import get_conserved, get_primary


class FaceArray:
    """
    Geometry and fluxes of one family of interfaces.

    Attributes:
        length, cosx, cosy: Face geometry, shape (n1, n2)
        flux: Conservative flux, shape (n1, n2, 4)
        flux_h, flux_b: Distribution flux, shape (n1, n2, uNum, vNum)
    """

    def __init__(self, length, cosx, cosy, velocity_shape):
        self.length = length
        self.cosx = cosx
        self.cosy = cosy
        n1, n2 = length.shape
        self.flux = np.zeros((n1, n2, 4))
        self.flux_h = np.zeros((n1, n2) + tuple(velocity_shape))
        self.flux_b = np.zeros((n1, n2) + tuple(velocity_shape))


class FlowField:
    """
    Cell states and interface fluxes on a Mesh2D.

    Attributes:
        mesh: The Mesh2D
        grid: The VelocityGrid
        gas: The GasModel
        w, h, b, sh, sb: Cell arrays (see module docstring)
        length, area: Cell geometry, shared with the mesh
        vface, hface: FaceArray of vertical and horizontal interfaces
    """

    def __init__(self, mesh, grid, gas):
        """
        Allocate the field for a mesh and a velocity grid.

        Args:
            mesh: Mesh2D
            grid: VelocityGrid
            gas: GasModel
        """
        self.mesh = mesh
        self.grid = grid
        self.gas = gas

        nxg, nyg = mesh.nx + 2, mesh.ny + 2
        u_num, v_num = grid.shape

        self.w = np.zeros((nxg, nyg, 4))
        self.h = np.zeros((nxg, nyg, u_num, v_num))
        self.b = np.zeros((nxg, nyg, u_num, v_num))
        self.sh = np.zeros((nxg, nyg, u_num, v_num, 2))
        self.sb = np.zeros((nxg, nyg, u_num, v_num, 2))

        self.length = mesh.length
        self.area = mesh.area

        self.vface = FaceArray(mesh.vface_length, mesh.vface_cosx, mesh.vface_cosy, grid.shape)
        self.hface = FaceArray(mesh.hface_length, mesh.hface_cosx, mesh.hface_cosy, grid.shape)

    @classmethod
    def from_arrays(cls, mesh, grid, gas, w, h, b):
        """
        Build a field from existing cell arrays (e.g. a restart).

        Raises:
            ValueError: If array shapes disagree with the mesh or velocity grid
        """
        field = cls(mesh, grid, gas)
        for name, src in (('w', w), ('h', h), ('b', b)):
            dst = getattr(field, name)
            src = np.asarray(src, dtype=np.float64)
            if src.shape != dst.shape:
                raise ValueError(f"Array '{name}' has shape {src.shape}, expected {dst.shape}")
            dst[...] = src
        return field

    def initialize(self, prim):
        """
        Set every cell, ghost cells included, to equilibrium at a primitive state.

        Args:
            prim: (rho, u, v, lambda)
        """
        prim = np.asarray(prim, dtype=np.float64)
        H, B = discrete_maxwell(self.grid.u_space, self.grid.v_space, prim, self.gas.ck)
        self.w[...] = get_conserved(prim, self.gas.gamma)
        self.h[...] = H
        self.b[...] = B
        self.sh[...] = 0.0
        self.sb[...] = 0.0

    def set_ghost_cells(self, bc_w, bc_e, bc_s, bc_n):
        """
        Fill the ghost ring with equilibrium at the boundary states.

        Args:
            bc_w, bc_e, bc_s, bc_n: Primitive states of the four boundaries
        """
        nx, ny = self.mesh.nx, self.mesh.ny
        sides = (
            (bc_w, (0, slice(1, ny + 1))),
            (bc_e, (nx + 1, slice(1, ny + 1))),
            (bc_s, (slice(1, nx + 1), 0)),
            (bc_n, (slice(1, nx + 1), ny + 1)),
        )
        for bc, index in sides:
            prim = np.asarray(bc, dtype=np.float64)
            H, B = discrete_maxwell(self.grid.u_space, self.grid.v_space, prim, self.gas.ck)
            self.w[index] = get_conserved(prim, self.gas.gamma)
            self.h[index] = H
            self.b[index] = B

    def primitive(self):
        """
        Primitive variables of all interior cells.

        Returns:
            prim: shape (nx, ny, 4)
        """
        return _primitive_field(self.mesh.interior(self.w), self.gas.gamma)

    def is_finite(self):
        """True if all interior conservative variables are finite with positive density and lambda."""
        w = self.mesh.interior(self.w)
        if not np.all(np.isfinite(w)):
            return False
        prim = self.primitive()
        return bool(np.all(prim[..., 0] > 0.0) and np.all(prim[..., 3] > 0.0))

    def __repr__(self):
        return f"FlowField({self.mesh!r}, {self.grid!r})"


@njit(parallel=True, error_model='numpy')
def _primitive_field(w, gamma):
    """Convert an (n1, n2, 4) conservative field to primitive variables."""
    prim = np.empty_like(w)
    for i in prange(w.shape[0]):
        for j in range(w.shape[1]):
            prim[i, j] = get_primary(w[i, j], gamma)
    return prim
