"""Tests for sequential.py

These test aren't meant to be especially thorough. The intention is to
document and provide basic sanity checks / regression tests for fundamental
behaviors of the reference engine.
"""

import unittest
from unittest import mock

import numpy as np

from errors import CellAccountingError, InvalidArgument
from grid import ALIVE, DEAD, GridState
import sequential
from tests import patterns


def step_grid(grid):
    """Compute one generation of grid, returning (next grid, account)."""
    destination = GridState.allocate(grid.size)
    account = sequential.step(grid.cells, destination.cells, grid.size)
    return destination, account


class TestStep(unittest.TestCase):
    def test_blinker_oscillates(self):
        horizontal = patterns.horizontal_blinker()
        vertical, _ = step_grid(horizontal)
        self.assertEqual(vertical, patterns.vertical_blinker())
        again, _ = step_grid(vertical)
        self.assertEqual(again, horizontal)

    def test_blinker_across_the_edge(self):
        """A blinker split across the wrap-around edge still oscillates."""
        horizontal = patterns.horizontal_blinker(size=5, row=0, col=4)
        vertical, _ = step_grid(horizontal)
        self.assertEqual(
            vertical, patterns.vertical_blinker(size=5, row=4, col=0))

    def test_block_is_stable(self):
        grid = patterns.block()
        next_grid, account = step_grid(grid)
        self.assertEqual(next_grid, grid)
        self.assertEqual(account, sequential.StepAccount(0, 0, 36))

    def test_extinction(self):
        next_grid, account = step_grid(GridState.empty(7))
        self.assertEqual(next_grid.population(), 0)
        self.assertEqual(account.unchanged, 49)

    def test_source_is_not_modified(self):
        grid = GridState.random(12, 0.4, np.random.default_rng(7))
        before = grid.copy()
        step_grid(grid)
        self.assertEqual(grid, before)

    def test_every_destination_cell_is_written(self):
        grid = patterns.block(size=6)
        destination = np.full((6, 6), 7, np.uint8)
        sequential.step(grid.cells, destination, 6)
        self.assertTrue(np.isin(destination, (DEAD, ALIVE)).all())

    def test_accounting_for_blinker(self):
        _, account = step_grid(patterns.horizontal_blinker())
        # The two ends die and two cells are born above and below the middle.
        self.assertEqual(account, sequential.StepAccount(2, 2, 21))

    def test_accounting_covers_every_cell(self):
        grid = GridState.random(20, 0.5, np.random.default_rng(3))
        _, account = step_grid(grid)
        self.assertEqual(sum(account), 400)

    def test_single_cell_world_always_dies(self):
        """An ALIVE 1x1 world sees itself as 8 neighbors, and dies."""
        alive = GridState.from_cells([ALIVE], 1)
        next_grid, account = step_grid(alive)
        self.assertEqual(next_grid.population(), 0)
        self.assertEqual(account, sequential.StepAccount(0, 1, 0))
        dead, _ = step_grid(next_grid)
        self.assertEqual(dead.population(), 0)

    def test_bad_accounting_fails_loudly(self):
        grid = patterns.block()
        destination = GridState.allocate(grid.size)
        with mock.patch('sequential._play', return_value=(0, 0, 35)):
            with self.assertRaises(CellAccountingError):
                sequential.step(grid.cells, destination.cells, grid.size)

    def test_rejects_aliased_buffers(self):
        grid = patterns.block()
        with self.assertRaises(InvalidArgument):
            sequential.step(grid.cells, grid.cells, grid.size)

    def test_rejects_mismatched_buffers(self):
        grid = patterns.block(size=6)
        with self.assertRaises(InvalidArgument):
            sequential.step(grid.cells, np.empty((5, 5), np.uint8), 6)


class TestSequentialEngine(unittest.TestCase):
    def test_round_trip_through_buffers(self):
        engine = sequential.SequentialEngine(5)
        source, destination = engine.allocate(), engine.allocate()
        engine.load(patterns.horizontal_blinker(), source)
        account = engine.step(source, destination, 5)
        engine.barrier()
        self.assertEqual(engine.fetch(destination),
                         patterns.vertical_blinker())
        self.assertEqual(sum(account), 25)

    def test_fetch_copies(self):
        engine = sequential.SequentialEngine(3)
        buffer = engine.allocate()
        engine.load(GridState.empty(3), buffer)
        grid = engine.fetch(buffer)
        buffer[0, 0] = ALIVE
        self.assertEqual(grid.population(), 0)

    def test_rejects_non_positive_size(self):
        with self.assertRaises(InvalidArgument):
            sequential.SequentialEngine(0)


if __name__ == '__main__':
    unittest.main()
