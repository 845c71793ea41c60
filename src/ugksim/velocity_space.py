"""
Discrete Velocity Space

Quadrature nodes (u, v) and weights shared read-only by every cell and
interface of a run. Two constructions are provided:

- Composite closed Newton-Cotes rule on a bounded box (default order 4,
  i.e. Boole's rule), suited to flows with large bulk velocity.
- Gauss-Hermite rule, exact for polynomial moments of a Maxwellian at
  rest, with weights rescaled by exp(x²) so that a plain weighted sum
  integrates any distribution.
"""

import logging

import numpy as np
from scipy.integrate import newton_cotes

logger = logging.getLogger(__name__)


class VelocityGrid:
    """
    Immutable 2D discrete velocity grid.

    Attributes:
        u_space, v_space: Node coordinates, shape (u_num, v_num)
        weight: Quadrature weights, shape (u_num, v_num)
        u_num, v_num: Number of nodes per direction
        u_max, v_max: Largest absolute node velocity per direction
    """

    def __init__(self, u_nodes, v_nodes, u_weights, v_weights):
        """
        Build the tensor-product grid from 1D rules.

        Args:
            u_nodes, u_weights: 1D nodes and weights along u
            v_nodes, v_weights: 1D nodes and weights along v

        Raises:
            ValueError: If nodes and weights disagree in size
        """
        u_nodes = np.asarray(u_nodes, dtype=np.float64)
        v_nodes = np.asarray(v_nodes, dtype=np.float64)
        u_weights = np.asarray(u_weights, dtype=np.float64)
        v_weights = np.asarray(v_weights, dtype=np.float64)

        if u_nodes.shape != u_weights.shape or v_nodes.shape != v_weights.shape:
            raise ValueError(
                f"Nodes and weights must have equal size: "
                f"u {u_nodes.shape} vs {u_weights.shape}, v {v_nodes.shape} vs {v_weights.shape}"
            )

        self.u_num = len(u_nodes)
        self.v_num = len(v_nodes)
        self.u_space, self.v_space = np.meshgrid(u_nodes, v_nodes, indexing='ij')
        self.weight = np.outer(u_weights, v_weights)
        self.u_max = float(np.max(np.abs(u_nodes)))
        self.v_max = float(np.max(np.abs(v_nodes)))

        for a in (self.u_space, self.v_space, self.weight):
            a.flags.writeable = False

    @property
    def shape(self):
        """(u_num, v_num)"""
        return (self.u_num, self.v_num)

    def __repr__(self):
        return (f"VelocityGrid(u_num={self.u_num}, v_num={self.v_num}, "
                f"u_max={self.u_max:.3g}, v_max={self.v_max:.3g})")


def newton_cotes_1d(v_min, v_max, num, order=4):
    """
    Composite closed Newton-Cotes rule on [v_min, v_max].

    Args:
        v_min, v_max: Interval bounds
        num: Requested number of points; raised to the next k*order + 1
        order: Degree of each Newton-Cotes panel

    Returns:
        nodes, weights: 1D arrays of equal size
    """
    if v_max <= v_min:
        raise ValueError(f"Empty velocity interval [{v_min}, {v_max}]")
    if num < order + 1:
        raise ValueError(f"Need at least {order + 1} points for order {order}, got {num}")

    n_panels = -(-(num - 1) // order)
    n_points = n_panels * order + 1
    if n_points != num:
        logger.warning("Velocity points raised from %d to %d for order-%d Newton-Cotes rule",
                       num, n_points, order)

    nodes = np.linspace(v_min, v_max, n_points)
    dv = nodes[1] - nodes[0]

    panel, _ = newton_cotes(order, 1)
    weights = np.zeros(n_points)
    for k in range(n_panels):
        weights[k * order:(k + 1) * order + 1] += panel
    weights *= dv

    return nodes, weights


def gauss_hermite_1d(num, scale=1.0):
    """
    Gauss-Hermite nodes with weights including the exp(x²) factor.

    Args:
        num: Number of points
        scale: Stretch factor of the nodes (thermal velocity scale)

    Returns:
        nodes, weights: 1D arrays
    """
    x, w = np.polynomial.hermite.hermgauss(num)
    return scale * x, scale * w * np.exp(x**2)


def newton_cotes_grid(u_range=(-15.0, 15.0), u_num=64, v_range=(-15.0, 15.0), v_num=64, order=4):
    """
    Velocity grid from composite Newton-Cotes rules.

    Example:
        >>> grid = newton_cotes_grid((-6, 6), 41, (-6, 6), 41)
        >>> grid.shape
        (41, 41)
    """
    u_nodes, u_weights = newton_cotes_1d(u_range[0], u_range[1], u_num, order)
    v_nodes, v_weights = newton_cotes_1d(v_range[0], v_range[1], v_num, order)
    return VelocityGrid(u_nodes, v_nodes, u_weights, v_weights)


def gauss_hermite_grid(u_num=28, v_num=28, scale=1.0):
    """Velocity grid from Gauss-Hermite rules."""
    u_nodes, u_weights = gauss_hermite_1d(u_num, scale)
    v_nodes, v_weights = gauss_hermite_1d(v_num, scale)
    return VelocityGrid(u_nodes, v_nodes, u_weights, v_weights)
