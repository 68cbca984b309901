"""The rules of Conway's Game of Life on a toroidal grid.

These functions are plain Python so they can be compiled for each place a
generation gets computed: by numba.njit for the sequential engine and by
numba.cuda.jit as device functions for the GPU kernel. That way both engines
share the exact same rule by construction. They also work uncompiled on any
2D numpy array, which is handy for testing.
"""

from grid import ALIVE, DEAD


def count_neighbors(frame, row, col, size):
    """Count the ALIVE cells among the 8 neighbors of (row, col).

    The world wraps around in both dimensions. For a 1x1 world, every
    neighbor is the cell itself, so an ALIVE cell counts itself 8 times.
    """
    up = (row - 1 + size) % size
    down = (row + 1) % size
    left = (col - 1 + size) % size
    right = (col + 1) % size
    return (frame[up, left] + frame[up, col] + frame[up, right] +
            frame[row, left] + frame[row, right] +
            frame[down, left] + frame[down, col] + frame[down, right])


def apply_rule(state, neighbors):
    """Compute the next state of a cell from its state and neighbor count.

    A DEAD cell with exactly 3 neighbors is born, otherwise it stays DEAD. An
    ALIVE cell survives with 2 or 3 neighbors and dies of loneliness (fewer)
    or overpopulation (more).
    """
    if state == ALIVE:
        if neighbors == 2 or neighbors == 3:
            return ALIVE
        return DEAD
    if neighbors == 3:
        return ALIVE
    return DEAD
