"""Summary metrics for a concentration field."""

import numpy as np

from turinglab.field.grid import PeriodicGrid


def field_summary(x: np.ndarray) -> dict[str, float]:
    """Basic statistics of a field.

    Statistics are taken over finite cells only; ``finite_fraction``
    reports how many cells that is. A field with no finite cells yields
    NaN statistics.

    Args:
        x: Field of shape (rows, cols).

    Returns:
        Dict with keys mean, std, min, max, finite_fraction.
    """
    finite = np.isfinite(x)
    finite_fraction = float(finite.mean())
    if not finite.any():
        nan = float("nan")
        return {"mean": nan, "std": nan, "min": nan, "max": nan,
                "finite_fraction": finite_fraction}
    values = x[finite]
    return {
        "mean": float(values.mean()),
        "std": float(values.std()),
        "min": float(values.min()),
        "max": float(values.max()),
        "finite_fraction": finite_fraction,
    }


def field_entropy(x: np.ndarray) -> float:
    """Compute spatial entropy of the field.

    Treats the absolute field values as a probability distribution
    over spatial locations (after normalization). Higher entropy means
    more uniform distribution; lower entropy means concentrated values.
    An all-zero field is treated as uniform.

    Args:
        x: Field of shape (rows, cols).

    Returns:
        Entropy in nats, between 0 and log(rows * cols).
    """
    values = np.abs(x)
    total = values.sum()
    if total == 0:
        return float(np.log(values.size))
    probs = values / total
    nonzero = probs[probs > 0]
    return float(-np.sum(nonzero * np.log(nonzero)))


def field_structure(x: np.ndarray) -> float:
    """Measure spatial autocorrelation of the field.

    Computes the correlation between each cell and the mean of its four
    wrapped neighbours. Patterned fields score close to 1, white noise
    close to 0.

    Args:
        x: Field of shape (rows, cols).

    Returns:
        Pearson correlation in [-1, 1]; 0 for a constant field.
    """
    grid = PeriodicGrid(x)
    neighbor_mean = (
        x[grid.neighbors(1, axis=0), :]
        + x[:, grid.neighbors(1, axis=1)]
        + x[grid.neighbors(-1, axis=0), :]
        + x[:, grid.neighbors(-1, axis=1)]
    ) / 4.0

    v_centered = x.ravel() - x.mean()
    n_centered = neighbor_mean.ravel() - neighbor_mean.mean()
    numerator = np.sum(v_centered * n_centered)
    denominator = np.sqrt(np.sum(v_centered ** 2) * np.sum(n_centered ** 2) + 1e-10)
    return float(numerator / denominator)
