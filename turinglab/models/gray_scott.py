"""Gray-Scott kinetics in the (a, b) = (U, V) convention."""

from dataclasses import dataclass

import numpy as np

from turinglab.field.laplacian import laplacian
from turinglab.models.base import ReactionModel


@dataclass(frozen=True)
class GrayScottParameters:
    """Diffusion constants plus feed and kill rates."""
    d_a: float = 0.16
    d_b: float = 0.08
    feed: float = 0.035
    kill: float = 0.065


class GrayScottModel(ReactionModel):
    """Gray-Scott model.

    da/dt = Da * lap(a) - a * b^2 + F * (1 - a)
    db/dt = Db * lap(b) + a * b^2 - (F + k) * b

    Concentrations are not clamped.
    """

    def __init__(self, params: GrayScottParameters) -> None:
        self.params = params

    def evaluate(self, a: np.ndarray, b: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        p = self.params
        reaction = a * b * b
        with np.errstate(over="ignore", invalid="ignore"):
            da = p.d_a * laplacian(a) - reaction + p.feed * (1.0 - a)
            db = p.d_b * laplacian(b) + reaction - (p.feed + p.kill) * b
        return da, db
