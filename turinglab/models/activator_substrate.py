"""Activator-substrate kinetics with a saturating activator production term.

    da/dt = Da * lap(a) + rho_a * (a^2 / (1 + Ka * a^2)) / b - mu_a * a + sigma_a
    db/dt = Db * lap(b) + rho_b * a^2 - mu_b * b + sigma_b

The activator term is singular where b is zero and a is not. Those
cells become inf or NaN and the values are left to propagate; guarding
against them is up to whoever picks the parameters and initial fields.
Where the production term rho_a * a^2 / (1 + Ka * a^2) is exactly zero
the activation is zero, whatever b is.
"""

from dataclasses import dataclass

import numpy as np

from turinglab.field.laplacian import laplacian
from turinglab.models.base import ReactionModel


@dataclass(frozen=True)
class ModelParameters:
    """Coefficients of the activator-substrate model.

    Attributes:
        d_a: Activator diffusion constant (Da).
        d_b: Substrate diffusion constant (Db).
        rho_a: Activator production rate.
        rho_b: Substrate production rate.
        mu_a: Activator decay rate.
        mu_b: Substrate decay rate.
        k_a: Saturation constant (Ka).
        sigma_a: Activator source term.
        sigma_b: Substrate source term.
    """
    d_a: float = 0.005
    d_b: float = 0.2
    rho_a: float = 0.01
    rho_b: float = 0.02
    mu_a: float = 0.01
    mu_b: float = 0.02
    k_a: float = 0.25
    sigma_a: float = 0.0
    sigma_b: float = 0.0


class ActivatorSubstrateModel(ReactionModel):
    """The canonical two-species model ("model1")."""

    def __init__(self, params: ModelParameters) -> None:
        self.params = params

    def evaluate(self, a: np.ndarray, b: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        p = self.params
        a2 = a * a

        # Division by b is where inf originates; keep numpy quiet and let
        # the values through. Cells without production stay at zero even
        # where b is zero.
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            production = p.rho_a * (a2 / (1.0 + p.k_a * a2))
            activation = np.divide(
                production, b, out=np.zeros_like(production), where=production != 0
            )
            da = (
                p.d_a * laplacian(a)
                + activation
                - p.mu_a * a
                + p.sigma_a
            )
            db = (
                p.d_b * laplacian(b)
                + p.rho_b * a2
                - p.mu_b * b
                + p.sigma_b
            )
        return da, db
