"""Drive a Game of Life simulation through many generations.

This module provides the interface between a starting GridState and the
engines that compute each next generation: either kernel.ParallelEngine,
which runs on an NVidia GPU, or sequential.SequentialEngine, which runs on
the CPU. It owns the two buffers a simulation alternates between and times
the whole run.
"""

from dataclasses import dataclass, field
import time

import tqdm

from errors import InvalidArgument
import kernel
import sequential

# Updating the CLI is relatively slow, so don't update the progress bar more
# often than once every second.
PROGRESS_UPDATE_INTERVAL = 1


@dataclass
class RunResult:
    """The outcome of stepping a simulation through some generations."""
    grid: object
    steps: int
    realization: str
    # Seconds spent in the generation loop, including the final barrier.
    elapsed_time: float = 0.0
    # Seconds per step. Only measured for synchronous engines, since timing
    # individual GPU steps would mean waiting on the device after each one.
    step_times: list = field(default_factory=list)
    # A sequential.StepAccount per step, where the engine provides one.
    accounts: list = field(default_factory=list)


@dataclass
class Comparison:
    """Results from running the same world on both engines."""
    parallel: RunResult
    sequential: RunResult

    @property
    def identical(self):
        return self.parallel.grid == self.sequential.grid

    @property
    def speedup(self):
        if self.parallel.elapsed_time <= 0:
            return None
        return self.sequential.elapsed_time / self.parallel.elapsed_time


def run(initial, steps, engine, logger=None, progress=False):
    """Compute the world steps generations after initial.

    Two buffers are allocated up front. Each step reads one and writes the
    other, then the two swap roles, so no step ever writes a cell that it
    still needs to read.

    Parameters
    ----------
    initial : GridState
        The world at generation 0. It is never modified.
    steps : int
        How many generations to compute. Must not be negative.
    engine : kernel.ParallelEngine or sequential.SequentialEngine
        Computes each generation from the last.
    logger : log.RunLogger, optional
        Receives per-step timing (for synchronous engines) and run summaries.
    progress : bool
        Show a progress bar while running.

    Returns
    -------
    RunResult
        The world after exactly steps generations, and timing data.
    """
    if steps < 0:
        raise InvalidArgument(
            f'Step count must not be negative, got {steps}.')
    if initial.size != engine.size:
        raise InvalidArgument(
            f'A {initial.size}x{initial.size} grid needs an engine for that '
            f'size, got one for {engine.size}x{engine.size}.')
    if steps == 0:
        return RunResult(initial.copy(), 0, engine.name)

    size = initial.size
    buffers = (engine.allocate(), engine.allocate())
    engine.load(initial, buffers[0])
    # Get compilation out of the way so the clock only sees stepping.
    engine.prepare()
    # Which buffer holds the current generation. Flipped after every step.
    current = 0
    result = RunResult(None, steps, engine.name)

    generations = tqdm.trange(
        steps, disable=not progress, mininterval=PROGRESS_UPDATE_INTERVAL,
        bar_format=('{n_fmt}/{total_fmt} |{bar}| '
                    'Elapsed: {elapsed} | '
                    'Remaining: {remaining}'))
    start_time = time.perf_counter()
    for _ in generations:
        step_start = time.perf_counter()
        account = engine.step(buffers[current], buffers[1 - current], size)
        if engine.synchronous:
            result.step_times.append(time.perf_counter() - step_start)
            if account is not None:
                result.accounts.append(account)
        current = 1 - current
    # Nothing may read the last generation until every step has finished.
    engine.barrier()
    result.elapsed_time = time.perf_counter() - start_time
    generations.close()

    assert current == steps % 2
    result.grid = engine.fetch(buffers[current])
    if logger:
        # Printing is slow, so per-step lines wait until the clock stops.
        if engine.synchronous:
            logger.log_run_start(engine.name)
            accounts = result.accounts or [None] * steps
            for generation, (step_time, account) in enumerate(
                    zip(result.step_times, accounts)):
                logger.log_step(
                    engine.name, size, generation, step_time, account)
        logger.log_run(result)
    return result


def compare(initial, steps, tile_size=kernel.DEFAULT_TILE_SIZE,
            pad_to_power_of_two=False, logger=None, progress=False):
    """Run the same world on the GPU and the CPU and compare the results.

    Parameters
    ----------
    initial : GridState
        The world at generation 0.
    steps : int
        How many generations to compute.
    tile_size : int
        Threads per side of each GPU block.
    pad_to_power_of_two : bool
        Round the number of GPU blocks per side up to a power of two.

    Returns
    -------
    Comparison
        Both run results. Check Comparison.identical for agreement.
    """
    parallel_engine = kernel.ParallelEngine(
        initial.size, tile_size, pad_to_power_of_two)
    sequential_engine = sequential.SequentialEngine(initial.size)
    comparison = Comparison(
        run(initial, steps, parallel_engine, logger, progress),
        run(initial, steps, sequential_engine, logger, progress))
    if logger:
        logger.log_comparison(comparison)
    return comparison
