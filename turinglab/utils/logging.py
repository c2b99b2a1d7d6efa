"""Weights & Biases tracking for simulation runs.

Scalar field metrics go to the run history; snapshots of the activator
field are logged as grayscale images next to them so a pattern can be
followed as it forms. wandb is imported lazily and only needed when
``LogConfig.wandb`` is on.
"""

import dataclasses
from typing import Any, Optional

import numpy as np

from turinglab.configs import Config


def run_name(config: Config) -> str:
    """Short run label, e.g. ``gray_scott-128x128-seed0``."""
    return (
        f"{config.model.name}-{config.grid.rows}x{config.grid.cols}"
        f"-seed{config.run.seed}"
    )


def field_to_image(field_values: np.ndarray) -> np.ndarray:
    """Scale a field to uint8 grayscale over its finite range.

    Non-finite cells are drawn black. A constant (or entirely
    non-finite) field maps to all zeros.
    """
    finite = np.isfinite(field_values)
    image = np.zeros(field_values.shape, dtype=np.uint8)
    if not finite.any():
        return image
    values = field_values[finite]
    lo, hi = float(values.min()), float(values.max())
    if hi > lo:
        image[finite] = np.round((values - lo) / (hi - lo) * 255.0).astype(np.uint8)
    return image


def init_wandb(config: Config) -> None:
    """Start a W&B run under config.log.project with the full config attached."""
    import wandb

    wandb.init(
        project=config.log.project,
        name=run_name(config),
        config=dataclasses.asdict(config),
    )


def log_metrics(
    metrics: dict[str, Any],
    step: int,
    field_values: Optional[np.ndarray] = None,
) -> None:
    """Log field metrics, and optionally an activator snapshot, at a step.

    Args:
        metrics: Metric name to scalar value. NaN values are logged as is.
        step: Simulation iteration for the x-axis.
        field_values: Activator field to log as the ``field/a`` image.
    """
    import wandb

    logged: dict[str, Any] = {k: float(v) for k, v in metrics.items()}
    if field_values is not None:
        logged["field/a"] = wandb.Image(
            field_to_image(field_values), caption=f"iteration {step}"
        )
    wandb.log(logged, step=step)


def finish_wandb(summary: Optional[dict[str, Any]] = None) -> None:
    """Record end-of-run summary values and close the W&B run."""
    import wandb

    if summary and wandb.run is not None:
        wandb.run.summary.update(summary)
    wandb.finish()
