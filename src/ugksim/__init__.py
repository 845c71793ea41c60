"""
UGKSim: Unified Gas-Kinetic Scheme for 2D Rarefied Flows

Finite-volume UGKS with the Shakhov collision model on structured
meshes and a fixed discrete velocity space, valid from free-molecular
to continuum regimes.
"""

__version__ = "0.1.0"

from .constants import GasModel, IDIRC, JDIRC, CAVITY
from .mesh import Mesh2D
from .velocity_space import VelocityGrid, newton_cotes_grid, gauss_hermite_grid
from .field import FlowField, FaceArray
from .solver import CavitySolver, SolverConfig, StepState, NumericalBreakdownError

__all__ = [
    "GasModel",
    "IDIRC",
    "JDIRC",
    "CAVITY",
    "Mesh2D",
    "VelocityGrid",
    "newton_cotes_grid",
    "gauss_hermite_grid",
    "FlowField",
    "FaceArray",
    "CavitySolver",
    "SolverConfig",
    "StepState",
    "NumericalBreakdownError",
]
