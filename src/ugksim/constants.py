"""
Physical Constants, Gas Models and Reference Cases

All quantities are dimensionless (reference density, temperature and
length of the problem set to one).
"""

import math
from dataclasses import dataclass

import numpy as np

# ==================== NUMERICAL CONSTANTS ====================

PI = math.pi
SMV = np.finfo(np.float32).tiny  # Small value to avoid 0/0

# Mesh direction tags
IDIRC = 0  # i direction
JDIRC = 1  # j direction

# Moment table sizes
MNUM = 6  # Highest order of normal velocity moments
MTUM = 4  # Highest order of tangential velocity moments

# ==================== MOLECULAR MODELS ====================

class MolecularModel:
    """
    Molecular interaction model parameters.

    Attributes:
        alpha: Scattering coefficient (1.0 for HS/VHS)
        omega: Viscosity temperature-dependence index
    """

    def __init__(self, alpha, omega):
        self.alpha = alpha
        self.omega = omega


MOLECULAR_MODELS = {
    # Hard sphere
    'HS': MolecularModel(alpha=1.0, omega=0.5),

    # Variable hard sphere, argon
    'VHS': MolecularModel(alpha=1.0, omega=0.81),

    # Variable soft sphere, argon
    'VSS': MolecularModel(alpha=1.4, omega=0.81),
}


def reference_viscosity(kn, alpha_ref=1.0, omega_ref=0.5):
    """
    Viscosity coefficient in the reference state.

        mu_ref = 5(a+1)(a+2)sqrt(pi) / (4a(5-2w)(7-2w)) * Kn

    Args:
        kn: Knudsen number in reference state
        alpha_ref: Scattering coefficient of the molecular model
        omega_ref: Temperature index of the molecular model

    Returns:
        mu_ref: Dimensionless reference viscosity
    """
    return (5.0 * (alpha_ref + 1.0) * (alpha_ref + 2.0) * math.sqrt(PI)
            / (4.0 * alpha_ref * (5.0 - 2.0 * omega_ref) * (7.0 - 2.0 * omega_ref)) * kn)


@dataclass(frozen=True)
class GasModel:
    """
    Immutable gas constants shared by every kernel call of a run.

    Attributes:
        ck: Internal degrees of freedom (1 is a monatomic gas in 2D)
        pr: Prandtl number
        kn: Knudsen number in reference state
        omega: Temperature dependence index of viscosity
        alpha_ref: Scattering coefficient of the reference model
        omega_ref: Temperature index of the reference model
    """
    ck: int = 1
    pr: float = 2.0 / 3.0
    kn: float = 0.075
    omega: float = 0.81
    alpha_ref: float = 1.0
    omega_ref: float = 0.5

    @property
    def gamma(self) -> float:
        """Ratio of specific heats."""
        return (self.ck + 4.0) / (self.ck + 2.0)

    @property
    def mu_ref(self) -> float:
        """Viscosity coefficient in reference state."""
        return reference_viscosity(self.kn, self.alpha_ref, self.omega_ref)

    @classmethod
    def from_model(cls, name, kn, ck=1, pr=2.0 / 3.0, omega=0.81):
        """
        Build gas constants from a named molecular model.

        Raises:
            ValueError: If the model is unknown
        """
        if name not in MOLECULAR_MODELS:
            raise ValueError(f"Unknown molecular model: {name}. Use: {list(MOLECULAR_MODELS)}")
        model = MOLECULAR_MODELS[name]
        return cls(ck=ck, pr=pr, kn=kn, omega=omega,
                   alpha_ref=model.alpha, omega_ref=model.omega)


# ==================== REFERENCE CASES ====================

# Lid-driven cavity, Kn = 0.075
# States are primitive: density, u-velocity, v-velocity, lambda = 1/temperature
CAVITY = {
    'x_range': (0.0, 1.0),
    'y_range': (0.0, 1.0),
    'n_cells': (45, 45),
    'u_range': (-15.0, 15.0),
    'v_range': (-15.0, 15.0),
    'velocity_points': (64, 64),
    'init_gas': (1.0, 0.0, 0.0, 1.0),
    'bc_w': (1.0, 0.0, 0.0, 1.0),
    'bc_e': (1.0, 0.0, 0.0, 1.0),
    'bc_s': (1.0, 0.0, 0.0, 1.0),
    'bc_n': (1.0, 0.15, 0.0, 1.0),
}
