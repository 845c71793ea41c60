"""
Structured 2D Mesh

Uniform rectangular mesh with one ring of ghost cells.

Index method (ghost-padded cell arrays, interior cells 1..nx, 1..ny):

              hface(i-1, j)
            ----------------
            |              |
 vface(i-1, |   cell(i, j) | vface(i, j-1)
      j-1)  |              |
            ----------------
              hface(i-1, j-1)

Vertical face (i, j), i = 0..nx, j = 0..ny-1, lies between cells
(i, j+1) and (i+1, j+1); its normal points in +x.
Horizontal face (i, j), i = 0..nx-1, j = 0..ny, lies between cells
(i+1, j) and (i+1, j+1); its normal points in +y.
"""

import numpy as np

from .constants import IDIRC, JDIRC


class Mesh2D:
    """
    Uniform 2D mesh on a rectangle.

    Attributes:
        nx, ny: Number of interior cells in x and y
        dx, dy: Cell size
        x, y: Cell center coordinates, shape (nx+2, ny+2)
        area: Cell area, shape (nx+2, ny+2)
        length: Cell length in i and j direction, shape (nx+2, ny+2, 2)
        vface_length, vface_cosx, vface_cosy: Vertical faces, shape (nx+1, ny)
        hface_length, hface_cosx, hface_cosy: Horizontal faces, shape (nx, ny+1)
    """

    def __init__(self, x_range=(0.0, 1.0), y_range=(0.0, 1.0), nx=45, ny=45):
        """
        Build cell and interface geometry.

        Args:
            x_range: (x_start, x_end)
            y_range: (y_start, y_end)
            nx, ny: Number of interior cells

        Raises:
            ValueError: If the cell counts or extents are invalid
        """
        if nx < 1 or ny < 1:
            raise ValueError(f"Mesh needs at least one cell per direction, got nx={nx}, ny={ny}")
        if x_range[1] <= x_range[0] or y_range[1] <= y_range[0]:
            raise ValueError(f"Empty domain: x_range={x_range}, y_range={y_range}")

        self.nx = nx
        self.ny = ny
        self.x_range = tuple(x_range)
        self.y_range = tuple(y_range)
        self.dx = (x_range[1] - x_range[0]) / nx
        self.dy = (y_range[1] - y_range[0]) / ny

        # Cell centers, ghost cells included
        xc = x_range[0] + (np.arange(nx + 2) - 0.5) * self.dx
        yc = y_range[0] + (np.arange(ny + 2) - 0.5) * self.dy
        self.x, self.y = np.meshgrid(xc, yc, indexing='ij')

        self.area = np.full((nx + 2, ny + 2), self.dx * self.dy)
        self.length = np.empty((nx + 2, ny + 2, 2))
        self.length[:, :, IDIRC] = self.dx
        self.length[:, :, JDIRC] = self.dy

        # Vertical faces
        self.vface_length = np.full((nx + 1, ny), self.dy)
        self.vface_cosx = np.ones((nx + 1, ny))
        self.vface_cosy = np.zeros((nx + 1, ny))

        # Horizontal faces
        self.hface_length = np.full((nx, ny + 1), self.dx)
        self.hface_cosx = np.zeros((nx, ny + 1))
        self.hface_cosy = np.ones((nx, ny + 1))

    @property
    def n_cells(self):
        """Number of interior cells."""
        return self.nx * self.ny

    def interior(self, a):
        """View of a ghost-padded cell array without the ghost ring."""
        return a[1:self.nx + 1, 1:self.ny + 1]

    def __repr__(self):
        return (f"Mesh2D(nx={self.nx}, ny={self.ny}, "
                f"dx={self.dx:.4g}, dy={self.dy:.4g})")
