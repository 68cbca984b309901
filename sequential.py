"""A single-threaded engine for stepping Game of Life simulations.

This is the reference implementation that the GPU kernel gets compared
against, and the fallback for machines without a CUDA device. It visits every
cell in row-major order, using the same rules as the kernel module compiled
for the CPU with Numba.
"""

from collections import namedtuple

from numba import njit

from errors import CellAccountingError, InvalidArgument
from grid import ALIVE, DEAD, GridState
import rules

_count_neighbors = njit(rules.count_neighbors)
_apply_rule = njit(rules.apply_rule)

# How the cells of the world changed in one step. Every cell lands in exactly
# one of these buckets, so they always sum to size * size.
StepAccount = namedtuple('StepAccount', ['births', 'deaths', 'unchanged'])


# Compiled eagerly so the first timed step doesn't include compilation.
@njit('UniTuple(int64, 3)(uint8[:, :], uint8[:, :], int64)')
def _play(source, destination, size):
    births = 0
    deaths = 0
    unchanged = 0
    for row in range(size):
        for col in range(size):
            state = source[row, col]
            next_state = _apply_rule(
                state, _count_neighbors(source, row, col, size))
            destination[row, col] = next_state
            if state == DEAD and next_state == ALIVE:
                births += 1
            elif state == ALIVE and next_state == DEAD:
                deaths += 1
            else:
                unchanged += 1
    return births, deaths, unchanged


def check_buffers(source, destination, size):
    """Make sure source and destination are distinct size x size buffers."""
    if size < 1:
        raise InvalidArgument(f'Grid size must be positive, got {size}.')
    if source is destination:
        raise InvalidArgument('Source and destination must be distinct.')
    for buffer in (source, destination):
        if buffer.shape != (size, size):
            raise InvalidArgument(
                f'Expected a {size}x{size} buffer, got shape {buffer.shape}.')


def step(source, destination, size):
    """Compute the next generation of source into destination.

    Parameters
    ----------
    source : np.ndarray
        The current generation, shaped (size, size). It is only read.
    destination : np.ndarray
        A buffer the same shape as source. Every cell gets overwritten.
    size : int
        The length of one side of the world.

    Returns
    -------
    StepAccount
        How many cells were born, died, or stayed the same.

    Raises
    ------
    CellAccountingError
        If the accounting doesn't cover every cell exactly once, in which case
        destination can't be trusted.
    """
    check_buffers(source, destination, size)
    account = StepAccount(*_play(source, destination, size))
    if sum(account) != size * size:
        raise CellAccountingError(
            f'Testing issue - not all cells were taken into account: '
            f'{account} for {size * size} cells.')
    return account


class SequentialEngine:
    """Steps simulations on the host, one cell at a time.

    This class has the same interface as kernel.ParallelEngine, so the
    gol_simulation module can drive either one. Buffers are plain numpy
    arrays, and every step finishes before step returns.
    """
    name = 'sequential'
    synchronous = True

    def __init__(self, size):
        if size < 1:
            raise InvalidArgument(f'Grid size must be positive, got {size}.')
        self.size = size

    def allocate(self):
        return GridState.allocate(self.size).cells

    def load(self, grid, buffer):
        buffer[:] = grid.cells

    def prepare(self):
        # _play is compiled eagerly when this module is imported.
        pass

    def step(self, source, destination, size):
        return step(source, destination, size)

    def barrier(self):
        # Nothing is ever in flight.
        pass

    def fetch(self, buffer):
        return GridState(buffer.copy())
