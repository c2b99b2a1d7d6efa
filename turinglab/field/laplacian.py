"""5-point finite-difference Laplacian with periodic boundaries."""

import numpy as np

from turinglab.field.grid import PeriodicGrid

# Unit grid spacing squared.
DX2 = 1.0


def laplacian(x: np.ndarray) -> np.ndarray:
    """Compute the discrete Laplacian of a field.

    For every cell (i, j):

        L[i,j] = (x[i+1,j] + x[i,j+1] + x[i-1,j] + x[i,j-1] - 4*x[i,j]) / dx^2

    with neighbour indices wrapped onto the torus. The terms are summed
    in exactly that order.

    Args:
        x: Field of shape (rows, cols). Not modified.

    Returns:
        A freshly allocated array of the same shape.
    """
    grid = PeriodicGrid(x)
    down = grid.neighbors(1, axis=0)
    right = grid.neighbors(1, axis=1)
    up = grid.neighbors(-1, axis=0)
    left = grid.neighbors(-1, axis=1)

    # Fancy indexing gathers into new arrays, so x is only ever read.
    out = x[down, :] + x[:, right]
    out += x[up, :]
    out += x[:, left]
    out -= 4.0 * x
    out /= DX2
    return out
