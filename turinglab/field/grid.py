"""Toroidal index arithmetic over a 2D field.

Indices are resolved with a single modulus pass per axis. The only
supported use is an offset of -1, 0 or +1 from an in-range index, which
is the neighbourhood the 5-point Laplacian reads.
"""

import numpy as np

_STENCIL_OFFSETS = (-1, 0, 1)


def wrap_index(i: int, extent: int) -> int:
    """Wrap a row or column index onto [0, extent).

    -1 maps to extent - 1 and extent maps to 0.
    """
    return i % extent


class PeriodicGrid:
    """Read/write view of a field with periodic boundaries.

    Reads through ``grid[i, j]`` wrap out-of-range indices onto the
    opposite edge. Writes must target in-range cells.

    Attributes:
        field: The wrapped array, shape (rows, cols). Not copied.
    """

    def __init__(self, field: np.ndarray) -> None:
        if field.ndim != 2:
            raise ValueError(f"PeriodicGrid needs a 2D field, got shape {field.shape}")
        if field.shape[0] <= 0 or field.shape[1] <= 0:
            raise ValueError(f"Field dimensions must be positive, got {field.shape}")
        self.field = field

    @property
    def shape(self) -> tuple[int, int]:
        return self.field.shape  # type: ignore[return-value]

    @property
    def rows(self) -> int:
        return self.field.shape[0]

    @property
    def cols(self) -> int:
        return self.field.shape[1]

    def resolve(self, i: int, j: int) -> tuple[int, int]:
        """Map a possibly out-of-range (i, j) to its canonical cell."""
        return wrap_index(i, self.rows), wrap_index(j, self.cols)

    def __getitem__(self, index: tuple[int, int]) -> float:
        i, j = self.resolve(*index)
        return float(self.field[i, j])

    def __setitem__(self, index: tuple[int, int], value: float) -> None:
        i, j = index
        if not (0 <= i < self.rows and 0 <= j < self.cols):
            raise IndexError(
                f"Write index ({i}, {j}) outside {self.rows}x{self.cols} grid"
            )
        self.field[i, j] = value

    def neighbors(self, offset: int, axis: int) -> np.ndarray:
        """Wrapped index vector for every cell shifted by offset along axis.

        ``field[grid.neighbors(1, 0), :]`` is the field seen from row i + 1
        at every row i.

        Args:
            offset: One of -1, 0, +1.
            axis: 0 for rows, 1 for columns.

        Returns:
            Integer array of length rows (axis 0) or cols (axis 1).
        """
        if offset not in _STENCIL_OFFSETS:
            raise ValueError(f"Only stencil offsets {_STENCIL_OFFSETS} are supported, got {offset}")
        if axis not in (0, 1):
            raise ValueError(f"axis must be 0 or 1, got {axis}")
        extent = self.field.shape[axis]
        return np.mod(np.arange(extent) + offset, extent)
