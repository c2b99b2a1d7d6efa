"""Explicit forward-Euler stepping."""

import numpy as np

from turinglab.models.base import ReactionModel
from turinglab.simulation.state import SimulationState

# Fixed time step.
DT = 1.0


def euler_step(state: SimulationState, model: ReactionModel) -> None:
    """Advance the state by one forward-Euler step, in place.

    Both rates are evaluated from the same pre-step (a, b) before either
    field is touched. No stability control is performed.

    Args:
        state: Simulation state; a, b and iteration are updated.
        model: Reaction model providing (da/dt, db/dt).
    """
    da, db = model.evaluate(state.a, state.b)
    with np.errstate(over="ignore", invalid="ignore"):
        state.a += da * DT
        state.b += db * DT
    state.iteration += 1
