"""Command line entry points for running and generating Game of Life worlds.

Usage:
    gol FILENAME SIZE STEPS [--realization {parallel,sequential,both}] ...
    gol-generate SIZE FILENAME [--density P] [--seed S]
"""

import argparse
from dataclasses import dataclass
import sys

import numpy as np

from config import Realization, RunConfig
from errors import GameOfLifeError
from grid import GridState
import gol_simulation
import grid_file
import kernel
import log
import sequential


@dataclass
class Outcome:
    """Either the value a run produced or the error that stopped it."""
    value: object = None
    error: Exception = None

    @property
    def ok(self):
        return self.error is None


def _run_selected(initial, config, logger):
    if config.realization == Realization.SEQUENTIAL:
        engine = sequential.SequentialEngine(config.size)
        return gol_simulation.run(
            initial, config.steps, engine, logger, config.progress)

    if not kernel.is_available():
        if config.realization == Realization.PARALLEL:
            raise GameOfLifeError('No CUDA device available.')
        logger.warn('No CUDA device available, running sequentially only')
        engine = sequential.SequentialEngine(config.size)
        return gol_simulation.run(
            initial, config.steps, engine, logger, config.progress)

    if config.realization == Realization.PARALLEL:
        engine = kernel.ParallelEngine(
            config.size, config.tile_size, config.pad_to_power_of_two)
        return gol_simulation.run(
            initial, config.steps, engine, logger, config.progress)

    comparison = gol_simulation.compare(
        initial, config.steps, config.tile_size, config.pad_to_power_of_two,
        logger, config.progress)
    if not comparison.identical:
        raise GameOfLifeError(
            'Parallel and sequential engines produced different results.')
    return comparison.sequential


def play(config, logger):
    """Load a world, step it, and write out the final generation.

    Any GameOfLifeError is caught and returned in the Outcome, leaving the
    caller to decide whether to abort.

    Parameters
    ----------
    config : RunConfig
        What to run and where to put the results.
    logger : log.RunLogger
        Receives diagnostics and stats.

    Returns
    -------
    Outcome
        On success, the value is the path of the written grid file.
    """
    try:
        config.validate()
        initial = grid_file.read_grid(config.filename, config.size, logger)
        logger.log_corner(initial)
        result = _run_selected(initial, config, logger)
        logger.log_corner(result.grid)
        path = grid_file.write_grid(result.grid, config.output_dir, logger)
        if config.image_file:
            log.export_image(result.grid, config.image_file)
        if config.stats_file:
            logger.export_stats(config.stats_file)
    except GameOfLifeError as error:
        return Outcome(error=error)
    return Outcome(value=path)


def make_parser():
    parser = argparse.ArgumentParser(
        prog='gol',
        description=(
            "Play Conway's Game of Life on a toroidal grid loaded from a "
            'binary file, on the GPU and/or the CPU.'))
    parser.add_argument('filename', help='the input grid file')
    parser.add_argument('size', type=int, help='the grid side length')
    parser.add_argument('steps', type=int, help='generations to play')
    parser.add_argument(
        '--realization', choices=[r.name.lower() for r in Realization],
        default='both', help='which engine(s) to run (default: both)')
    parser.add_argument(
        '--tile-size', type=int, default=kernel.DEFAULT_TILE_SIZE,
        help='GPU threads per side of each block (default: %(default)s)')
    parser.add_argument(
        '--pad-pow2', action='store_true',
        help='round GPU blocks per side up to a power of two')
    parser.add_argument(
        '--output-dir', default='.',
        help='where to write the final grid (default: current directory)')
    parser.add_argument('--stats', help='export per-step stats to this CSV')
    parser.add_argument(
        '--image', help='save a PNG preview of the final grid')
    parser.add_argument(
        '--progress', action='store_true', help='show a progress bar')
    parser.add_argument(
        '--quiet', action='store_true', help='only print warnings and errors')
    return parser


def main(argv=None):
    args = make_parser().parse_args(argv)
    config = RunConfig(
        filename=args.filename,
        size=args.size,
        steps=args.steps,
        realization=Realization[args.realization.upper()],
        tile_size=args.tile_size,
        pad_to_power_of_two=args.pad_pow2,
        output_dir=args.output_dir,
        stats_file=args.stats,
        image_file=args.image,
        progress=args.progress,
        verbose=not args.quiet)
    logger = log.RunLogger(verbose=config.verbose)
    outcome = play(config, logger)
    if not outcome.ok:
        logger.error(str(outcome.error))
        return 1
    return 0


def generate_main(argv=None):
    parser = argparse.ArgumentParser(
        prog='gol-generate',
        description='Write a random Game of Life grid file.')
    parser.add_argument('size', type=int, help='the grid side length')
    parser.add_argument('filename', help='the grid file to write')
    parser.add_argument(
        '--density', type=float, default=0.5,
        help='chance that each cell starts alive (default: %(default)s)')
    parser.add_argument(
        '--seed', type=int, help='seed for repeatable grids')
    args = parser.parse_args(argv)
    logger = log.RunLogger()
    try:
        grid = GridState.random(
            args.size, args.density, np.random.default_rng(args.seed))
        grid_file.write_grid_to(grid, args.filename)
    except GameOfLifeError as error:
        logger.error(str(error))
        return 1
    logger.info(f'wrote {grid.size}x{grid.size} grid with '
                f'{grid.population()} live cells to {args.filename}')
    return 0


if __name__ == '__main__':
    sys.exit(main())
