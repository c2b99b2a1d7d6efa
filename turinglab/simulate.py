"""Command-line entry point: run a reaction-diffusion simulation.

Example:
    turing-lab --grid.rows 200 --grid.cols 200 --run.iterations 5000 \
        --server.enabled True
"""

from __future__ import annotations

import logging
from typing import Any

import numpy as np

from turinglab.configs import Config
from turinglab.field.field import random_fields
from turinglab.models import create_model
from turinglab.simulation.driver import FrameConsumer, SimulationDriver
from turinglab.simulation.state import SimulationState, create_state
from turinglab.utils.logging import finish_wandb, init_wandb, log_metrics

logger = logging.getLogger(__name__)


def create_initial_state(config: Config) -> SimulationState:
    """Create a state with uniform-random fields drawn from config.run.seed."""
    rng = np.random.default_rng(config.run.seed)
    a, b = random_fields(config.grid.rows, config.grid.cols, rng)
    return create_state(a, b, config.model.to_parameters())


def simulate(
    config: Config,
    consumer: FrameConsumer | None = None,
    state: SimulationState | None = None,
) -> SimulationState:
    """Run a full simulation described by config.

    When config.server.enabled is set and no consumer is given, a
    FrameBridge is created, the streaming server is started in a daemon
    thread and the bridge becomes the consumer.

    Args:
        config: Master configuration.
        consumer: Optional frame consumer.
        state: Optional initial state; random fields are generated if None.

    Returns:
        The final SimulationState.
    """
    model = create_model(config.model)
    if state is None:
        state = create_initial_state(config)

    if consumer is None and config.server.enabled:
        from turinglab.server.main import start_server_thread
        from turinglab.server.streaming import FrameBridge

        bridge = FrameBridge(target_fps=config.server.target_fps)
        start_server_thread(bridge, host=config.server.host, port=config.server.port)
        print(f"Streaming on ws://{config.server.host}:{config.server.port}/ws/simulation")
        consumer = bridge

    def _on_metrics(metrics: dict[str, Any], iteration: int) -> None:
        logger.info(
            "iteration %d: a mean=%.4f min=%.4f max=%.4f",
            iteration, metrics["a/mean"], metrics["a/min"], metrics["a/max"],
        )
        if config.log.wandb:
            log_metrics(metrics, step=iteration, field_values=state.a)

    driver = SimulationDriver(
        state,
        model,
        consumer=consumer,
        check_finite=config.run.check_finite,
        on_metrics=_on_metrics,
        log_interval=config.log.log_interval,
    )

    steps = 0
    if config.log.wandb:
        init_wandb(config)
    try:
        steps = driver.run(config.run.iterations)
    finally:
        if config.log.wandb:
            finish_wandb({"steps": steps, "iteration": state.iteration})

    logger.info("Finished %d of %d steps", steps, config.run.iterations)
    return state


def main() -> None:
    """CLI entry point using tyro for argument parsing."""
    import tyro

    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    config = tyro.cli(Config)

    print("=" * 60)
    print("Turing Lab")
    print("=" * 60)
    print(f"Grid: {config.grid.rows}x{config.grid.cols}")
    print(f"Model: {config.model.name}")
    print(f"Iterations: {config.run.iterations}")
    print(f"Seed: {config.run.seed}")
    print("=" * 60)

    simulate(config)


if __name__ == "__main__":
    main()
