"""CUDA kernel for stepping a Game of Life simulation on the GPU.

This code is transpiled into device code on demand using Numba, then runs
with one GPU thread per cell of the world. The rules themselves live in the
rules module and get compiled here as device functions, so the kernel
computes exactly what the sequential engine computes.
"""

from dataclasses import dataclass
import math

from numba import cuda
from numba.cuda.cudadrv.driver import CudaAPIError

from errors import DecompositionMismatch, InvalidArgument, OutOfMemory
from grid import CELL_DTYPE, GridState
import rules

# Memory model for this kernel:
#
# +-------+-------+-------+
# | KxK   | KxK   | KxK.. |
# +-------+-------+-------+
# | KxK   | KxK   | KxK.. |
# +-------+-------+-------+
# | KxK.. | KxK.. | KxK.. |
# +-------+-------+-------+
#
# The world is tiled with square blocks of K x K threads, where K is the tile
# size. Each thread computes the next state for a single cell. Unless the
# world size is a multiple of K, the blocks along the bottom and right edges
# hang off the world (marked ..), and the threads out there must do nothing.

# 32 x 32 == 1024 == max threads per block on current NVidia devices.
MAX_THREADS_PER_BLOCK = 1024

# The default tile size, using a full block of threads.
DEFAULT_TILE_SIZE = 32

_count_neighbors = cuda.jit(device=True)(rules.count_neighbors)
_apply_rule = cuda.jit(device=True)(rules.apply_rule)


@dataclass(frozen=True)
class LaunchConfig:
    """How a world of world_size x world_size cells is split into blocks.

    Use make_launch_config to construct one of these, which guarantees the
    blocks cover the whole world.
    """
    world_size: int
    tile_size: int
    blocks_per_side: int

    @property
    def units_per_side(self):
        """The number of threads launched along each dimension."""
        return self.blocks_per_side * self.tile_size

    @property
    def blocks(self):
        return (self.blocks_per_side, self.blocks_per_side)

    @property
    def threads(self):
        return (self.tile_size, self.tile_size)

    def validate(self):
        """Raise DecompositionMismatch unless every cell gets a thread."""
        if self.units_per_side < self.world_size:
            raise DecompositionMismatch(
                f'{self.blocks_per_side} blocks of {self.tile_size} threads '
                f'cover only {self.units_per_side} of {self.world_size} '
                f'cells per side.')


def _next_power_of_two(value):
    return 1 << (value - 1).bit_length()


def make_launch_config(world_size, tile_size=DEFAULT_TILE_SIZE,
                       pad_to_power_of_two=False):
    """Choose a block layout that covers a world of the given size.

    Parameters
    ----------
    world_size : int
        The length of one side of the world.
    tile_size : int
        The number of threads along each side of a block.
    pad_to_power_of_two : bool
        If True, round the number of blocks per side up to a power of two.
        This launches more threads than needed, which the kernel's bounds
        check makes harmless.

    Returns
    -------
    LaunchConfig
        A validated launch configuration.
    """
    if world_size < 1:
        raise InvalidArgument(
            f'Grid size must be positive, got {world_size}.')
    if tile_size < 1 or tile_size * tile_size > MAX_THREADS_PER_BLOCK:
        raise InvalidArgument(
            f'Tile size must be between 1 and '
            f'{math.isqrt(MAX_THREADS_PER_BLOCK)}, got {tile_size}.')
    blocks_per_side = math.ceil(world_size / tile_size)
    if pad_to_power_of_two:
        blocks_per_side = _next_power_of_two(blocks_per_side)
    config = LaunchConfig(world_size, tile_size, blocks_per_side)
    config.validate()
    return config


@cuda.jit(device=True)
def in_bounds(row, col, size):
    """Check if a position is within the spacial bounds of the world."""
    return 0 <= row < size and 0 <= col < size


@cuda.jit
def _step_kernel(source, destination, size):
    # Each invocation of this function operates on a single cell (at position
    # row, col). Threads that fall outside the world don't touch either
    # buffer, rather than wrapping around onto some other thread's cell.
    row, col = cuda.grid(2)
    if not in_bounds(row, col, size):
        return

    neighbors = _count_neighbors(source, row, col, size)
    destination[row, col] = _apply_rule(source[row, col], neighbors)


def is_available():
    """Returns True iff there is a CUDA device (or simulator) to run on."""
    return cuda.is_available()


class ParallelEngine:
    """Steps simulations on the GPU, with one thread per cell.

    This class has the same interface as sequential.SequentialEngine, so the
    gol_simulation module can drive either one. Buffers live on the device.
    Calls to step only queue a kernel launch, so the caller must call barrier
    before reading results or timing.
    """
    name = 'parallel'
    synchronous = False

    def __init__(self, size, tile_size=DEFAULT_TILE_SIZE,
                 pad_to_power_of_two=False):
        self.size = size
        self.launch = make_launch_config(size, tile_size, pad_to_power_of_two)

    def allocate(self):
        try:
            return cuda.device_array((self.size, self.size), CELL_DTYPE)
        except CudaAPIError as error:
            raise OutOfMemory(
                f'Could not allocate a {self.size}x{self.size} grid on the '
                f'device: {error}') from error

    def load(self, grid, buffer):
        buffer.copy_to_device(grid.cells)

    def prepare(self):
        """Compile the kernel by stepping a throwaway 1x1 world."""
        source = cuda.to_device(GridState.empty(1).cells)
        destination = cuda.device_array((1, 1), CELL_DTYPE)
        _step_kernel[(1, 1), (1, 1)](source, destination, 1)
        cuda.synchronize()

    def step(self, source, destination, size):
        if source is destination:
            raise InvalidArgument('Source and destination must be distinct.')
        if size != self.launch.world_size:
            raise InvalidArgument(
                f'This engine was configured for size '
                f'{self.launch.world_size}, got {size}.')
        # Launches on the default stream run in order, so this one won't start
        # until every thread of the previous step has finished.
        _step_kernel[self.launch.blocks, self.launch.threads](
            source, destination, size)

    def barrier(self):
        cuda.synchronize()

    def fetch(self, buffer):
        return GridState(buffer.copy_to_host())
