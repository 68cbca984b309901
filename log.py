'''Report progress and capture timing stats for Game of Life runs.
'''
import csv
import sys

from PIL import Image

from errors import GridFileError
from grid import ALIVE

# When exporting a preview image, scale it up by this much to make it easier
# to see.
IMAGE_SCALE_FACTOR = 4

# Grayscale values for drawing cells in a preview image.
ALIVE_PIXEL = 0
DEAD_PIXEL = 255


def _export_csv(log_data, filename):
    try:
        with open(filename, 'w', newline='', encoding='ASCII') as file:
            writer = csv.writer(file)
            for row in log_data:
                writer.writerow(row)
    except OSError as error:
        raise GridFileError(
            f"Couldn't open file to write: {filename}") from error


def export_image(grid, filename, scale=IMAGE_SCALE_FACTOR):
    '''Save a grayscale picture of grid, with ALIVE cells drawn in black.

    This is only for looking at. It can't be loaded back as a grid.
    '''
    frame = (grid.cells != ALIVE).astype('uint8') * DEAD_PIXEL
    # Scale up (without interpolation, since we want to see every cell) in
    # both the vertical and horizontal dimensions.
    resized = frame.repeat(scale, 0).repeat(scale, 1)
    try:
        Image.fromarray(resized).save(filename)
    except (OSError, ValueError) as error:
        # Pillow raises ValueError for file extensions it can't encode.
        raise GridFileError(
            f"Couldn't write image: {filename}: {error}") from error


class RunLogger:
    '''A class to print diagnostics and collect stats for export.

    Construct one RunLogger for a batch of runs you want to compare and pass
    it to any code that needs to log events. Calling a log* method prints a
    message and/or records an event. Calling export_stats dumps the recorded
    stats to a CSV file.

    Informational messages go to stdout and are suppressed when verbose is
    False. Warnings and errors always go to stderr.
    '''
    def __init__(self, verbose=True, out=None, err=None):
        self.verbose = verbose
        self.out = out if out is not None else sys.stdout
        self.err = err if err is not None else sys.stderr
        self.stats = [(
            'realization',
            'grid_size',
            'generation',
            'elapsed_time',
            'births',
            'deaths',
            'unchanged',
        )]
        self.runs = []

    def info(self, message):
        if self.verbose:
            print(message, file=self.out)

    def warn(self, message):
        print(f'Warning: {message}', file=self.err)

    def error(self, message):
        print(f'Error: {message}', file=self.err)

    def log_corner(self, grid):
        '''Print the top-left corner of grid, one row per line.
        '''
        for row in grid.corner():
            self.info(' '.join(str(cell) for cell in row))

    def log_run_start(self, realization):
        self.info(f'Running {realization} engine')
        self.info('Generation \t Time')

    def log_step(self, realization, grid_size, generation, elapsed_time,
                 account=None):
        '''Log the completion of one step of a synchronous engine.
        '''
        self.info(f'[{generation}]\t\t {elapsed_time:f}s')
        births, deaths, unchanged = account if account else (None,) * 3
        self.stats.append((
            realization,
            grid_size,
            generation,
            elapsed_time,
            births,
            deaths,
            unchanged,
        ))

    def log_run(self, result):
        '''Log the completion of a whole run.
        '''
        self.runs.append(result)
        self.info(f'{result.realization}: {result.steps} generations in '
                  f'{result.elapsed_time:f}s')
        if result.realization == 'parallel':
            # Parallel runs only have a total time. Record it as a single
            # row so exported stats cover every run.
            self.stats.append((
                result.realization,
                result.grid.size,
                result.steps,
                result.elapsed_time,
                None,
                None,
                None,
            ))

    def log_comparison(self, comparison):
        if comparison.identical:
            self.info('Parallel and sequential results match')
        else:
            self.warn('Parallel and sequential results differ')
        if comparison.speedup is not None:
            self.info(f'Speedup: {comparison.speedup:f}')

    def export_stats(self, filename):
        '''Export a CSV file of all stats recorded by this logger.

        Raises GridFileError if the file can't be written.
        '''
        _export_csv(self.stats, filename)
