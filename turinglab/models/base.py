"""Reaction model interface."""

from abc import ABC, abstractmethod

import numpy as np


class ReactionModel(ABC):
    """Maps the current (a, b) field pair to their rates of change.

    Implementations must treat both inputs as read-only and return
    freshly allocated rate fields of the same shape. The rates include
    the diffusion terms, so an Euler step is simply ``a += da * dt``.
    """

    @abstractmethod
    def evaluate(self, a: np.ndarray, b: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """Return (da/dt, db/dt) evaluated at the given fields."""

    def __call__(self, a: np.ndarray, b: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        return self.evaluate(a, b)
