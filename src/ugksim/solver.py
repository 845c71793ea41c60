"""
UGKS Time-Marching Driver

Each step:
    1. Global time step from the CFL condition
    2. Slope reconstruction of h, b in both directions
    3. Interface fluxes (interior faces and boundaries)
    4. Update of conservative variables and distribution functions with
       the implicit Shakhov collision term
    5. Residual and validity check

Phases are separated: all slopes are final before any flux is computed,
and all fluxes are final before any cell is updated.
"""

import logging
from dataclasses import dataclass, field as dataclass_field
from typing import Callable, Optional, Tuple

import numpy as np
from numba import njit, prange

from .constants import SMV, CAVITY
from .distribution import discrete_maxwell, heat_flux, shakhov_part
from .flux import compute_fluxes_i, compute_fluxes_j, compute_wall_fluxes_i, compute_wall_fluxes_j
from .reconstruction import reconstruct
from .state import get_primary, sound_speed, collision_time

logger = logging.getLogger(__name__)

BOUNDARY_TYPES = ('diffuse', 'ghost')


class NumericalBreakdownError(RuntimeError):
    """Raised when the flow field contains non-finite or unphysical states."""


@dataclass(frozen=True)
class SolverConfig:
    """
    Parameters controlling the simulation.

    Boundary states are primitive: (density, u-velocity, v-velocity,
    lambda = 1/temperature).
    """
    cfl: float = 0.8
    max_iter: int = 500000
    eps: float = 1.0e-5
    log_interval: int = 100
    init_gas: Tuple[float, ...] = CAVITY['init_gas']
    bc_w: Tuple[float, ...] = CAVITY['bc_w']
    bc_e: Tuple[float, ...] = CAVITY['bc_e']
    bc_s: Tuple[float, ...] = CAVITY['bc_s']
    bc_n: Tuple[float, ...] = CAVITY['bc_n']
    boundary: str = 'diffuse'

    def __post_init__(self):
        if not 0.0 < self.cfl <= 1.0:
            raise ValueError(f"CFL number must be in (0, 1], got {self.cfl}")
        if self.log_interval < 1:
            raise ValueError(f"log_interval must be at least 1, got {self.log_interval}")
        if self.boundary not in BOUNDARY_TYPES:
            raise ValueError(f"Unknown boundary type: {self.boundary}. Use: {BOUNDARY_TYPES}")
        for name in ('init_gas', 'bc_w', 'bc_e', 'bc_s', 'bc_n'):
            state = getattr(self, name)
            if len(state) != 4:
                raise ValueError(f"{name} must have 4 components, got {len(state)}")
            if state[0] <= 0.0 or state[3] <= 0.0:
                raise ValueError(f"{name} needs positive density and lambda, got {state}")


@dataclass
class StepState:
    """Mutable state of the time marching, owned by the driver."""
    dt: float = 0.0
    iteration: int = 0
    sim_time: float = 0.0
    residual: np.ndarray = dataclass_field(default_factory=lambda: np.full(4, np.inf))


class CavitySolver:
    """
    UGKS solver for a closed rectangular domain.

    Example:
        >>> mesh = Mesh2D(nx=45, ny=45)
        >>> grid = newton_cotes_grid((-15, 15), 64, (-15, 15), 64)
        >>> field = FlowField(mesh, grid, GasModel(kn=0.075))
        >>> solver = CavitySolver(field, SolverConfig())
        >>> solver.run()
    """

    def __init__(self, field, config=None, initialize=True):
        """
        Args:
            field: FlowField to advance
            config: SolverConfig (defaults to the lid-driven cavity)
            initialize: Reset the field to config.init_gas; False keeps a restart state
        """
        self.field = field
        self.config = config or SolverConfig()
        self.state = StepState()

        self._bc = tuple(np.asarray(bc, dtype=np.float64) for bc in
                         (self.config.bc_w, self.config.bc_e, self.config.bc_s, self.config.bc_n))

        if initialize:
            self.field.initialize(self.config.init_gas)
        self.field.set_ghost_cells(*self._bc)

    # --- Phases ---

    def time_step(self):
        """Global time step from the CFL condition."""
        f = self.field
        rate = _max_signal_rate(f.w, f.length, f.grid.u_max, f.grid.v_max, f.gas.gamma)
        self.state.dt = self.config.cfl / rate
        return self.state.dt

    def reconstruct(self):
        """Van Leer slopes of h and b in all interior cells."""
        reconstruct(self.field)

    def evolve(self):
        """Fluxes across every interface of the mesh."""
        f = self.field
        g = f.grid
        gas = f.gas
        nx, ny = f.mesh.nx, f.mesh.ny
        dt = self.state.dt
        args = (g.u_space, g.v_space, g.weight, dt, gas.ck, gas.gamma, gas.pr, gas.mu_ref, gas.omega)

        if self.config.boundary == 'ghost':
            i_range, j_range = (0, nx + 1), (0, ny + 1)
        else:
            i_range, j_range = (1, nx), (1, ny)

        compute_fluxes_i(f.h, f.b, f.sh, f.sb, f.w, f.length,
                         f.vface.length, f.vface.cosx, f.vface.cosy,
                         f.vface.flux, f.vface.flux_h, f.vface.flux_b,
                         *args, *i_range)
        compute_fluxes_j(f.h, f.b, f.sh, f.sb, f.w, f.length,
                         f.hface.length, f.hface.cosx, f.hface.cosy,
                         f.hface.flux, f.hface.flux_h, f.hface.flux_b,
                         *args, *j_range)

        if self.config.boundary == 'diffuse':
            bc_w, bc_e, bc_s, bc_n = self._bc
            compute_wall_fluxes_i(bc_w, bc_e, f.h, f.b, f.sh, f.sb, f.length,
                                  f.vface.length, f.vface.cosx, f.vface.cosy,
                                  f.vface.flux, f.vface.flux_h, f.vface.flux_b,
                                  g.u_space, g.v_space, g.weight, dt, gas.ck)
            compute_wall_fluxes_j(bc_s, bc_n, f.h, f.b, f.sh, f.sb, f.length,
                                  f.hface.length, f.hface.cosx, f.hface.cosy,
                                  f.hface.flux, f.hface.flux_h, f.hface.flux_b,
                                  g.u_space, g.v_space, g.weight, dt, gas.ck)

    def update(self):
        """
        Advance cell states with the interface fluxes.

        Raises:
            NumericalBreakdownError: If the updated field is not physical
        """
        f = self.field
        g = f.grid
        gas = f.gas

        sum_res, sum_avg = _update_cells(
            f.w, f.h, f.b, f.area,
            f.vface.flux, f.vface.flux_h, f.vface.flux_b,
            f.hface.flux, f.hface.flux_h, f.hface.flux_b,
            g.u_space, g.v_space, g.weight,
            self.state.dt, gas.ck, gas.gamma, gas.pr, gas.mu_ref, gas.omega)

        self.state.residual = np.sqrt(f.mesh.n_cells * sum_res) / (sum_avg + SMV)

        if not f.is_finite():
            logger.error("Numerical breakdown at iteration %d (t = %.6g, dt = %.6g)",
                         self.state.iteration, self.state.sim_time, self.state.dt)
            raise NumericalBreakdownError(
                f"Non-physical flow state after iteration {self.state.iteration}"
            )

    def step(self):
        """One full time step. Returns the residual."""
        self.time_step()
        self.reconstruct()
        self.evolve()
        self.update()

        self.state.iteration += 1
        self.state.sim_time += self.state.dt
        return self.state.residual

    def run(self, max_iter=None, callback: Optional[Callable] = None):
        """
        March until every residual drops below eps or max_iter is reached.

        Args:
            max_iter: Iteration limit (defaults to config.max_iter)
            callback: Called as callback(state) after each step

        Returns:
            The final StepState
        """
        max_iter = self.config.max_iter if max_iter is None else max_iter
        logger.info("Starting UGKS run: %r, Kn = %g, CFL = %g",
                    self.field.mesh, self.field.gas.kn, self.config.cfl)

        while self.state.iteration < max_iter:
            res = self.step()

            if callback is not None:
                callback(self.state)

            if self.state.iteration % self.config.log_interval == 0:
                logger.info("iter %d  t = %.6g  dt = %.4g  res = %s",
                            self.state.iteration, self.state.sim_time, self.state.dt,
                            np.array2string(res, precision=3))

            if np.all(res < self.config.eps):
                logger.info("Converged after %d iterations", self.state.iteration)
                break
        else:
            logger.warning("Stopped at max_iter = %d, residual = %s",
                           max_iter, np.array2string(self.state.residual, precision=3))

        return self.state


# ==================== NUMBA-COMPILED FUNCTIONS ====================

@njit(error_model='numpy')
def _max_signal_rate(w, length, u_max, v_max, gamma):
    """Largest (|u| + c)/dx + (|v| + c)/dy over the interior cells."""
    nx = w.shape[0] - 2
    ny = w.shape[1] - 2
    tmax = 0.0
    for i in range(1, nx + 1):
        for j in range(1, ny + 1):
            prim = get_primary(w[i, j], gamma)
            sos = sound_speed(prim, gamma)
            u = max(u_max, abs(prim[1]))
            v = max(v_max, abs(prim[2]))
            tmax = max(tmax, (u + sos) / length[i, j, 0] + (v + sos) / length[i, j, 1])
    return tmax


@njit(parallel=True, error_model='numpy')
def _update_cells(w, h, b, area,
                  vflux, vflux_h, vflux_b, hflux, hflux_h, hflux_b,
                  u_space, v_space, weight, dt, ck, gamma, pr, mu_ref, omega):
    """
    Update all interior cells in place.

    The collision term is treated with the trapezoidal rule; the
    equilibrium at the new time level is known from the updated
    conservative variables, so the update stays explicit.

    Returns:
        sum_res: Sum of squared changes of w, shape (4,)
        sum_avg: Sum of |w|, shape (4,)
    """
    nx = w.shape[0] - 2
    ny = w.shape[1] - 2
    row_res = np.zeros((nx, 4))
    row_avg = np.zeros((nx, 4))

    for i in prange(nx):
        for j in range(ny):
            ic = i + 1
            jc = j + 1

            # W^n, equilibrium and collision time at t^n
            w_old = w[ic, jc].copy()
            prim_old = get_primary(w_old, gamma)
            H_old, B_old = discrete_maxwell(u_space, v_space, prim_old, ck)
            tau_old = collision_time(prim_old, mu_ref, omega)

            # W^{n+1}
            w_new = w_old + (vflux[i, j] - vflux[i + 1, j] + hflux[i, j] - hflux[i, j + 1]) / area[ic, jc]
            w[ic, jc] = w_new
            prim = get_primary(w_new, gamma)
            H, B = discrete_maxwell(u_space, v_space, prim, ck)
            tau = collision_time(prim, mu_ref, omega)

            # Shakhov part, heat flux from f^n
            qf = heat_flux(h[ic, jc], b[ic, jc], u_space, v_space, prim_old, weight)
            H_plus, B_plus = shakhov_part(H_old, B_old, u_space, v_space, qf, prim_old, ck, pr)
            H_old = H_old + H_plus
            B_old = B_old + B_plus
            H_plus, B_plus = shakhov_part(H, B, u_space, v_space, qf, prim, ck, pr)
            H = H + H_plus
            B = B + B_plus

            row_res[i, :] = row_res[i, :] + (w_old - w_new)**2
            row_avg[i, :] = row_avg[i, :] + np.abs(w_new)

            h[ic, jc] = (h[ic, jc]
                         + (vflux_h[i, j] - vflux_h[i + 1, j] + hflux_h[i, j] - hflux_h[i, j + 1]) / area[ic, jc]
                         + 0.5 * dt * (H / tau + (H_old - h[ic, jc]) / tau_old)) / (1.0 + 0.5 * dt / tau)
            b[ic, jc] = (b[ic, jc]
                         + (vflux_b[i, j] - vflux_b[i + 1, j] + hflux_b[i, j] - hflux_b[i, j + 1]) / area[ic, jc]
                         + 0.5 * dt * (B / tau + (B_old - b[ic, jc]) / tau_old)) / (1.0 + 0.5 * dt / tau)

    return row_res.sum(axis=0), row_avg.sum(axis=0)
