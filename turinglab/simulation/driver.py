"""SimulationDriver: runs the step loop and hands frames to a consumer.

The driver is the only place where integration steps are sequenced with
the outside world. It never sleeps or throttles; pacing belongs to the
consumer, and the consumer can stop the run by returning False.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

import numpy as np

from turinglab.analysis.field_metrics import field_entropy, field_structure, field_summary
from turinglab.models.base import ReactionModel
from turinglab.simulation.integrator import euler_step
from turinglab.simulation.state import SimulationState

logger = logging.getLogger(__name__)

# Receives a read-only view of field a and the completed iteration.
# Returning False stops the run; None or True continue.
FrameConsumer = Callable[[np.ndarray, int], Optional[bool]]

MetricsHook = Callable[[dict[str, Any], int], None]


class SimulationDriver:
    """Owns a SimulationState and advances it step by step.

    Args:
        state: State to integrate. Mutated in place.
        model: Reaction model used for every step.
        consumer: Optional frame consumer called after each step.
        check_finite: Log a warning at the first step whose fields contain
            NaN or inf. The values themselves are left untouched.
        on_metrics: Optional hook receiving field summary metrics every
            ``log_interval`` steps.
        log_interval: Step interval for on_metrics.

    Raises:
        ValueError: If the model carries parameters that differ from
            ``state.params``.
    """

    def __init__(
        self,
        state: SimulationState,
        model: ReactionModel,
        consumer: FrameConsumer | None = None,
        check_finite: bool = True,
        on_metrics: MetricsHook | None = None,
        log_interval: int = 100,
    ) -> None:
        if log_interval <= 0:
            raise ValueError(f"log_interval must be > 0, got {log_interval}")
        model_params = getattr(model, "params", None)
        if model_params is not None and model_params != state.params:
            raise ValueError(
                f"Model parameters {model_params} do not match state parameters {state.params}"
            )
        self.state = state
        self.model = model
        self.consumer = consumer
        self.check_finite = check_finite
        self.on_metrics = on_metrics
        self.log_interval = log_interval
        self._nonfinite_reported = False

    def frame_view(self) -> np.ndarray:
        """Read-only view of the activator field."""
        view = self.state.a.view()
        view.flags.writeable = False
        return view

    def metrics(self) -> dict[str, Any]:
        """Summary, entropy and structure of both fields, keyed a/<stat> and b/<stat>.

        Entropy and structure carry no meaning once a field holds non-finite values.
        """
        result: dict[str, Any] = {}
        for name, values in (("a", self.state.a), ("b", self.state.b)):
            for k, v in field_summary(values).items():
                result[f"{name}/{k}"] = v
            with np.errstate(invalid="ignore", divide="ignore", over="ignore"):
                result[f"{name}/entropy"] = field_entropy(values)
                result[f"{name}/structure"] = field_structure(values)
        return result

    def run(self, iterations: int) -> int:
        """Run up to ``iterations`` steps.

        The stop signal from the consumer is only checked between steps.
        Exceptions raised by the consumer propagate to the caller.

        Args:
            iterations: Non-negative step budget. 0 performs no steps.

        Returns:
            The number of steps performed.
        """
        if isinstance(iterations, bool) or not isinstance(iterations, (int, np.integer)):
            raise ValueError(f"iterations must be an integer, got {iterations!r}")
        if iterations < 0:
            raise ValueError(f"iterations must be >= 0, got {iterations}")

        logger.debug(
            "Running %d steps on %dx%d grid from iteration %d",
            iterations, *self.state.shape, self.state.iteration,
        )
        steps = 0
        for _ in range(iterations):
            euler_step(self.state, self.model)
            steps += 1

            if self.check_finite and not self._nonfinite_reported:
                self._report_nonfinite()

            if self.on_metrics is not None and self.state.iteration % self.log_interval == 0:
                self.on_metrics(self.metrics(), self.state.iteration)

            if self.consumer is not None:
                if self.consumer(self.frame_view(), self.state.iteration) is False:
                    logger.info("Consumer stopped the run at iteration %d", self.state.iteration)
                    break

        return steps

    def _report_nonfinite(self) -> None:
        if np.isfinite(self.state.a).all() and np.isfinite(self.state.b).all():
            return
        self._nonfinite_reported = True
        logger.warning(
            "Non-finite values in fields at iteration %d "
            "(check for zero substrate or unstable parameters)",
            self.state.iteration,
        )
