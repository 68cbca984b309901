'''Configuration objects for Game of Life runs.

A run loads a world from a grid file, steps it some number of generations on
the GPU, on the CPU, or on both for comparison, then writes the result. This
module collects all the settings for one such run.

To use, construct a RunConfig (normally from command line arguments in the
cli module) and pass it to cli.play.
'''

from dataclasses import dataclass
from enum import Enum

from errors import InvalidArgument
import kernel


class Realization(Enum):
    '''Which engine(s) compute the generations.
    '''
    # One GPU thread per cell.
    PARALLEL = 1
    # A single CPU thread visiting every cell.
    SEQUENTIAL = 2
    # Run both from the same starting world and compare their results.
    BOTH = 3


@dataclass
class RunConfig:
    '''All the settings for a single run.
    '''
    filename: str
    size: int
    steps: int
    realization: Realization = Realization.BOTH
    # Threads per side of each GPU block.
    tile_size: int = kernel.DEFAULT_TILE_SIZE
    # Round the number of GPU blocks per side up to a power of two.
    pad_to_power_of_two: bool = False
    # Where to write the final generation.
    output_dir: str = '.'
    # Optional CSV file for per-step and per-run stats.
    stats_file: str = None
    # Optional PNG preview of the final generation.
    image_file: str = None
    progress: bool = False
    verbose: bool = True

    def validate(self):
        '''Raise InvalidArgument if these settings can't describe a run.
        '''
        if self.size < 1:
            raise InvalidArgument(
                f'Grid size must be positive, got {self.size}.')
        if self.steps < 0:
            raise InvalidArgument(
                f'Step count must not be negative, got {self.steps}.')
        if self.tile_size < 1:
            raise InvalidArgument(
                f'Tile size must be positive, got {self.tile_size}.')
