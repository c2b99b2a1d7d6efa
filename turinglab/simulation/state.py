"""SimulationState: the field pair being integrated."""

from dataclasses import dataclass
from typing import Union

import numpy as np

from turinglab.field.field import check_same_shape
from turinglab.models.activator_substrate import ModelParameters
from turinglab.models.gray_scott import GrayScottParameters

Parameters = Union[ModelParameters, GrayScottParameters]


@dataclass
class SimulationState:
    """Mutable simulation state owned by the driver.

    Only the integrator writes to ``a``, ``b`` and ``iteration``.

    Attributes:
        a: Activator field, float64, shape (rows, cols).
        b: Substrate field, same shape as a.
        params: Immutable parameter record of the reaction model.
        iteration: Number of completed steps.
    """
    a: np.ndarray
    b: np.ndarray
    params: Parameters
    iteration: int = 0

    def __post_init__(self) -> None:
        check_same_shape(self.a, self.b)

    @property
    def shape(self) -> tuple[int, int]:
        return self.a.shape  # type: ignore[return-value]


def create_state(a: np.ndarray, b: np.ndarray, params: Parameters) -> SimulationState:
    """Create a SimulationState from caller-supplied initial fields.

    The inputs are copied into new float64 buffers, so the caller's
    arrays are never mutated by stepping.

    Raises:
        ValueError: If the fields are not 2D, are empty, or differ in shape.
    """
    a = np.array(a, dtype=np.float64)
    b = np.array(b, dtype=np.float64)
    check_same_shape(a, b)
    return SimulationState(a=a, b=b, params=params)
