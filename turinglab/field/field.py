"""Field construction helpers for the two concentration fields."""

import numpy as np


def create_field(rows: int, cols: int, value: float = 0.0) -> np.ndarray:
    """Create a float64 field filled with a constant value.

    Args:
        rows: Grid height.
        cols: Grid width.
        value: Fill value for every cell.

    Returns:
        Array of shape (rows, cols).
    """
    if rows <= 0 or cols <= 0:
        raise ValueError(f"Field dimensions must be positive, got {rows}x{cols}")
    return np.full((rows, cols), value, dtype=np.float64)


def random_fields(
    rows: int, cols: int, rng: np.random.Generator
) -> tuple[np.ndarray, np.ndarray]:
    """Create an (a, b) pair of uniform-random fields in [0, 1).

    Args:
        rows: Grid height.
        cols: Grid width.
        rng: Numpy generator. Field a is drawn before field b.

    Returns:
        Tuple of two float64 arrays of shape (rows, cols).
    """
    if rows <= 0 or cols <= 0:
        raise ValueError(f"Field dimensions must be positive, got {rows}x{cols}")
    a = rng.random((rows, cols), dtype=np.float64)
    b = rng.random((rows, cols), dtype=np.float64)
    return a, b


def check_same_shape(a: np.ndarray, b: np.ndarray) -> tuple[int, int]:
    """Validate a field pair and return its shared (rows, cols) shape.

    Raises:
        ValueError: If either field is not 2D, has an empty axis, or the
            two shapes differ.
    """
    if a.ndim != 2 or b.ndim != 2:
        raise ValueError(
            f"Fields must be 2D, got shapes {a.shape} and {b.shape}"
        )
    if a.shape != b.shape:
        raise ValueError(f"Field shapes differ: a={a.shape}, b={b.shape}")
    rows, cols = a.shape
    if rows <= 0 or cols <= 0:
        raise ValueError(f"Field dimensions must be positive, got {rows}x{cols}")
    return rows, cols
