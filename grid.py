"""The GridState class, which holds one generation of a Game of Life world.

A world is a square grid of N x N cells with toroidal topology: there is no
edge, so the last row borders the first and the last column borders the
first. This module only deals with storing cells. Computing the next
generation is handled by the rules, sequential and kernel modules.
"""

import numpy as np

from errors import InvalidArgument, OutOfMemory

# State values for cells in the world. These also match the values stored in
# grid files, so the cell count of a world is just the sum of its cells.
DEAD = 0
ALIVE = 1

# All grids use the same cell type on the host and on the GPU device.
CELL_DTYPE = np.uint8

# How many rows and columns of the top-left corner to show in diagnostics.
CORNER_EXTENT = 4


def _check_size(size):
    if size < 1:
        raise InvalidArgument(f'Grid size must be positive, got {size}.')


class GridState:
    """One generation of a square, toroidal Game of Life world.

    The cells are stored row major in a numpy array of shape (size, size).
    The size of a GridState never changes after it's constructed. Code that
    steps a simulation replaces the full contents of a buffer at once rather
    than editing cells in place.
    """
    def __init__(self, cells):
        cells = np.ascontiguousarray(cells, dtype=CELL_DTYPE)
        if cells.ndim != 2 or cells.shape[0] != cells.shape[1]:
            raise InvalidArgument(
                f'Grid cells must form a square, got shape {cells.shape}.')
        _check_size(cells.shape[0])
        self._cells = cells

    @classmethod
    def allocate(cls, size):
        """Allocate an uninitialized grid of size x size cells.

        Parameters
        ----------
        size : int
            The length of one side of the grid.

        Returns
        -------
        GridState
            A grid whose cell values are arbitrary until written.

        Raises
        ------
        InvalidArgument
            If size is not positive.
        OutOfMemory
            If the host can't provide a buffer that large.
        """
        _check_size(size)
        try:
            cells = np.empty((size, size), dtype=CELL_DTYPE)
        except MemoryError as error:
            raise OutOfMemory(
                f'Could not allocate a {size}x{size} grid.') from error
        return cls(cells)

    @classmethod
    def empty(cls, size):
        """Make a grid of size x size DEAD cells."""
        grid = cls.allocate(size)
        grid._cells.fill(DEAD)
        return grid

    @classmethod
    def from_cells(cls, cells, size):
        """Make a grid from exactly size * size cell values.

        Parameters
        ----------
        cells : array_like
            A flat or two-dimensional sequence of cell values in row-major
            order. Every value must be DEAD or ALIVE.
        size : int
            The length of one side of the grid.

        Raises
        ------
        InvalidArgument
            If there are not exactly size * size values, or if any value is
            something other than DEAD or ALIVE.
        """
        _check_size(size)
        values = np.asarray(cells)
        if values.size != size * size:
            raise InvalidArgument(
                f'Expected {size * size} cells for a {size}x{size} grid, '
                f'got {values.size}.')
        if not np.isin(values, (DEAD, ALIVE)).all():
            raise InvalidArgument('Cell values must be 0 (dead) or 1 (alive).')
        return cls(values.reshape((size, size)))

    @classmethod
    def random(cls, size, density=0.5, rng=None):
        """Make a grid where each cell is ALIVE with probability density."""
        if not 0.0 <= density <= 1.0:
            raise InvalidArgument(
                f'Density must be between 0 and 1, got {density}.')
        if rng is None:
            rng = np.random.default_rng()
        grid = cls.allocate(size)
        grid._cells[:] = rng.random((size, size)) < density
        return grid

    @property
    def size(self):
        """The length of one side of this grid."""
        return self._cells.shape[0]

    @property
    def cells(self):
        """The numpy array backing this grid, shaped (size, size)."""
        return self._cells

    def population(self):
        """Count the ALIVE cells in this grid."""
        return int(np.count_nonzero(self._cells))

    def copy(self):
        return GridState(self._cells.copy())

    def corner(self, extent=CORNER_EXTENT):
        """The top-left extent x extent block of cells, for diagnostics."""
        return self._cells[:extent, :extent].copy()

    def __eq__(self, other):
        if not isinstance(other, GridState):
            return NotImplemented
        return np.array_equal(self._cells, other._cells)

    def __repr__(self):
        return f'GridState(size={self.size}, population={self.population()})'
