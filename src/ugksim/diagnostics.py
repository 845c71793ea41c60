"""
Diagnostics and Output for UGKS Simulations

- Macroscopic fields (density, velocity, temperature, pressure, heat flux)
- Result export (Tecplot ASCII point format)
- Residual history (CSV)
- Field visualization
"""

import csv
import logging
from typing import Dict

import numpy as np
from numba import njit, prange

from .distribution import heat_flux
from .state import get_primary

logger = logging.getLogger(__name__)

RESULT_VARIABLES = ('X', 'Y', 'RHO', 'U', 'V', 'T', 'P', 'QX', 'QY')


@njit(parallel=True, error_model='numpy')
def compute_heat_flux_field(w, h, b, u_space, v_space, weight, gamma):
    """
    Heat flux of every cell in the global frame.

    Args:
        w: Conservative variables, shape (n1, n2, 4)
        h, b: Distribution function, shape (n1, n2, uNum, vNum)
        u_space, v_space, weight: Discrete velocity grid
        gamma: Ratio of specific heats

    Returns:
        qf: shape (n1, n2, 2)
    """
    n1, n2 = w.shape[0], w.shape[1]
    qf = np.empty((n1, n2, 2))
    for i in prange(n1):
        for j in range(n2):
            prim = get_primary(w[i, j], gamma)
            qf[i, j] = heat_flux(h[i, j], b[i, j], u_space, v_space, prim, weight)
    return qf


def macroscopic_fields(field) -> Dict[str, np.ndarray]:
    """
    Output variables of the interior cells.

    Temperature is 1/lambda and pressure rho/(2 lambda) in the
    nondimensionalization of the solver.

    Args:
        field: FlowField

    Returns:
        Dictionary keyed by RESULT_VARIABLES, each shape (nx, ny)
    """
    mesh = field.mesh
    grid = field.grid
    prim = field.primitive()
    qf = compute_heat_flux_field(mesh.interior(field.w), mesh.interior(field.h), mesh.interior(field.b),
                                 grid.u_space, grid.v_space, grid.weight, field.gas.gamma)

    return {
        'X': mesh.interior(mesh.x),
        'Y': mesh.interior(mesh.y),
        'RHO': prim[..., 0],
        'U': prim[..., 1],
        'V': prim[..., 2],
        'T': 1.0 / prim[..., 3],
        'P': 0.5 * prim[..., 0] / prim[..., 3],
        'QX': qf[..., 0],
        'QY': qf[..., 1],
    }


def write_result(field, filename, title="UGKS"):
    """
    Write macroscopic fields in Tecplot ASCII point format.

    Args:
        field: FlowField
        filename: Output path
        title: Dataset title
    """
    data = macroscopic_fields(field)
    nx, ny = field.mesh.nx, field.mesh.ny

    with open(filename, 'w') as f:
        f.write(f'TITLE = "{title}"\n')
        f.write('VARIABLES = ' + ', '.join(f'"{v}"' for v in RESULT_VARIABLES) + '\n')
        f.write(f'ZONE I = {nx}, J = {ny}, DATAPACKING = POINT\n')
        # Tecplot ordering: i fastest
        table = np.column_stack([data[v].T.ravel() for v in RESULT_VARIABLES])
        np.savetxt(f, table, fmt='%.10e')

    logger.info("Result written to %s", filename)


class HistoryWriter:
    """
    Residual history in CSV format.

    Usable as a CavitySolver.run() callback:
        >>> with HistoryWriter("cavity_history.csv") as history:
        ...     solver.run(callback=history)
    """

    FIELDS = ['iteration', 'sim_time', 'dt', 'res_rho', 'res_rhou', 'res_rhov', 'res_rhoE']

    def __init__(self, filename, interval=1):
        self.filename = filename
        self.interval = interval
        self._file = None
        self._writer = None

    def __enter__(self):
        self._file = open(self.filename, 'w', newline='')
        self._writer = csv.writer(self._file)
        self._writer.writerow(self.FIELDS)
        return self

    def __exit__(self, exc_type, exc, tb):
        self._file.close()
        self._file = None
        return False

    def __call__(self, state):
        if state.iteration % self.interval == 0:
            self._writer.writerow([state.iteration, state.sim_time, state.dt] + list(state.residual))


def plot_field(field, variable='U', filename=None, streamlines=True):
    """
    Contour plot of one macroscopic variable.

    Args:
        field: FlowField
        variable: One of RESULT_VARIABLES[2:]
        filename: Save figure to this path (shows it if None)
        streamlines: Overlay velocity streamlines
    """
    import matplotlib.pyplot as plt

    if variable not in RESULT_VARIABLES[2:]:
        raise ValueError(f"Unknown variable: {variable}. Use: {RESULT_VARIABLES[2:]}")

    data = macroscopic_fields(field)

    fig, ax = plt.subplots(figsize=(6, 5))
    cs = ax.contourf(data['X'], data['Y'], data[variable], levels=30, cmap='jet')
    fig.colorbar(cs, ax=ax, label=variable)

    if streamlines:
        ax.streamplot(data['X'][:, 0], data['Y'][0, :], data['U'].T, data['V'].T,
                      color='k', linewidth=0.5, density=1.2)

    ax.set_xlabel('x')
    ax.set_ylabel('y')
    ax.set_aspect('equal')
    ax.set_title(f'{variable}, Kn = {field.gas.kn:g}')

    if filename:
        fig.savefig(filename, dpi=150, bbox_inches='tight')
        plt.close(fig)
    else:
        plt.show()
