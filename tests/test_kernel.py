"""Tests for kernel.py

These tests run on Numba's CUDA simulator unless NUMBA_ENABLE_CUDASIM is set
to 0 (see tests/__init__.py), so keep worlds and tiles small. They aren't
meant to be especially thorough. The intention is to document and provide
basic sanity checks / regression tests for fundamental behaviors, and to make
sure the GPU engine agrees with the sequential one.
"""

import unittest

import numpy as np

from errors import DecompositionMismatch, InvalidArgument
from grid import GridState
import kernel
import sequential
from tests import patterns

# Small tiles keep the simulator fast and make partial blocks likely.
TILE_SIZE = 4


def step_on_device(grid, tile_size=TILE_SIZE, pad_to_power_of_two=False):
    """Compute one generation of grid with the GPU engine."""
    engine = kernel.ParallelEngine(grid.size, tile_size, pad_to_power_of_two)
    source, destination = engine.allocate(), engine.allocate()
    engine.load(grid, source)
    engine.step(source, destination, grid.size)
    engine.barrier()
    return engine.fetch(destination)


def step_on_host(grid):
    destination = GridState.allocate(grid.size)
    sequential.step(grid.cells, destination.cells, grid.size)
    return destination


class TestLaunchConfig(unittest.TestCase):
    def test_exact_fit(self):
        config = kernel.make_launch_config(16, 4)
        self.assertEqual(config.blocks, (4, 4))
        self.assertEqual(config.threads, (4, 4))
        self.assertEqual(config.units_per_side, 16)

    def test_rounds_up_partial_blocks(self):
        config = kernel.make_launch_config(10, 4)
        self.assertEqual(config.blocks_per_side, 3)
        self.assertEqual(config.units_per_side, 12)

    def test_pad_to_power_of_two(self):
        config = kernel.make_launch_config(10, 2, pad_to_power_of_two=True)
        # ceil(10 / 2) == 5 blocks, padded up to 8.
        self.assertEqual(config.blocks_per_side, 8)
        self.assertEqual(config.units_per_side, 16)

    def test_pad_leaves_powers_of_two_alone(self):
        config = kernel.make_launch_config(16, 4, pad_to_power_of_two=True)
        self.assertEqual(config.blocks_per_side, 4)

    def test_tiny_world_in_one_block(self):
        config = kernel.make_launch_config(1, kernel.DEFAULT_TILE_SIZE)
        self.assertEqual(config.blocks, (1, 1))

    def test_insufficient_blocks_are_rejected(self):
        config = kernel.LaunchConfig(
            world_size=10, tile_size=4, blocks_per_side=2)
        with self.assertRaises(DecompositionMismatch):
            config.validate()

    def test_rejects_bad_tile_sizes(self):
        with self.assertRaises(InvalidArgument):
            kernel.make_launch_config(10, 0)
        with self.assertRaises(InvalidArgument):
            kernel.make_launch_config(10, 33)

    def test_rejects_bad_world_size(self):
        with self.assertRaises(InvalidArgument):
            kernel.make_launch_config(0, 4)


class TestStepKernel(unittest.TestCase):
    def test_blinker_oscillates(self):
        horizontal = patterns.horizontal_blinker()
        vertical = step_on_device(horizontal)
        self.assertEqual(vertical, patterns.vertical_blinker())
        self.assertEqual(step_on_device(vertical), horizontal)

    def test_toroidal_wraparound(self):
        """Live cells in the far corners count as neighbors of (0, 0)."""
        grid = patterns.place(4, [(0, 0), (3, 3), (3, 0), (0, 3)])
        # These four cells form a block across the corners, which is stable.
        self.assertEqual(step_on_device(grid), grid)

    def test_block_is_stable(self):
        grid = patterns.block()
        self.assertEqual(step_on_device(grid), grid)

    def test_extinction(self):
        self.assertEqual(step_on_device(GridState.empty(6)).population(), 0)

    def test_bounds_guard_with_padded_launch(self):
        """Extra threads beyond the world must not read or write anything.

        With a 5x5 world and 2x2 tiles padded to a power of two, the launch
        has 8x8 threads. If the guard were missing, the simulator would raise
        on the out of range writes.
        """
        grid = GridState.random(5, 0.5, np.random.default_rng(11))
        self.assertEqual(
            step_on_device(grid, tile_size=2, pad_to_power_of_two=True),
            step_on_host(grid))

    def test_matches_sequential_engine(self):
        """Both engines produce identical results for arbitrary worlds."""
        rng = np.random.default_rng(42)
        for size in (1, 2, 3, 7, 9):
            for density in (0.2, 0.5):
                with self.subTest(size=size, density=density):
                    grid = GridState.random(size, density, rng)
                    self.assertEqual(step_on_device(grid), step_on_host(grid))

    def test_single_cell_world_always_dies(self):
        grid = GridState.from_cells([1], 1)
        self.assertEqual(step_on_device(grid).population(), 0)

    def test_source_is_not_modified(self):
        engine = kernel.ParallelEngine(6, TILE_SIZE)
        source, destination = engine.allocate(), engine.allocate()
        grid = patterns.glider(size=6)
        engine.load(grid, source)
        engine.step(source, destination, 6)
        engine.barrier()
        self.assertEqual(engine.fetch(source), grid)


class TestParallelEngine(unittest.TestCase):
    def test_rejects_aliased_buffers(self):
        engine = kernel.ParallelEngine(4, TILE_SIZE)
        buffer = engine.allocate()
        with self.assertRaises(InvalidArgument):
            engine.step(buffer, buffer, 4)

    def test_rejects_other_sizes(self):
        engine = kernel.ParallelEngine(4, TILE_SIZE)
        with self.assertRaises(InvalidArgument):
            engine.step(engine.allocate(), engine.allocate(), 5)

    def test_prepare_leaves_buffers_alone(self):
        grid = patterns.horizontal_blinker()
        engine = kernel.ParallelEngine(grid.size, TILE_SIZE)
        source, destination = engine.allocate(), engine.allocate()
        engine.load(grid, source)
        engine.prepare()
        self.assertEqual(engine.fetch(source), grid)
        engine.step(source, destination, grid.size)
        engine.barrier()
        self.assertEqual(engine.fetch(destination),
                         patterns.vertical_blinker())

    def test_is_available_on_simulator(self):
        self.assertTrue(kernel.is_available())


if __name__ == '__main__':
    unittest.main()
