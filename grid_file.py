"""Read and write worlds as flat binary grid files.

A grid file is just size * size native 32-bit integers (a C int each) in
row-major order, with no header. Each value is 0 for a DEAD cell or 1 for an
ALIVE one. The size isn't stored in the file, so readers must be told what
size to expect.
"""

import os.path

import numpy as np

from errors import GridFileError, InvalidArgument
from grid import GridState

# The on-disk type of one cell.
FILE_DTYPE = np.dtype(np.int32)


def output_filename(size):
    """The name used for a written grid, which never clobbers the input."""
    return f'table{size}x{size}_new.bin'


def read_grid(filename, size, logger=None):
    """Load a size x size world from a grid file.

    Parameters
    ----------
    filename : str
        The grid file to read.
    size : int
        The length of one side of the world stored in the file.
    logger : log.RunLogger, optional
        Told how many elements were read.

    Returns
    -------
    GridState
        The world in the file.

    Raises
    ------
    GridFileError
        If the file can't be read, holds the wrong number of cells or a
        partial one, or holds values other than 0 and 1.
    """
    try:
        byte_count = os.path.getsize(filename)
        values = np.fromfile(filename, dtype=FILE_DTYPE)
    except OSError as error:
        raise GridFileError(
            f"Couldn't open file to read: {filename}") from error
    # np.fromfile silently drops trailing bytes that don't fill a value.
    if byte_count % FILE_DTYPE.itemsize:
        raise GridFileError(
            f'{filename} ends with a partial element: {byte_count} bytes is '
            f'not a multiple of {FILE_DTYPE.itemsize}.')
    if values.size == 0:
        raise GridFileError(f"Couldn't read from file: {filename}")
    if logger:
        logger.info(f'elements read: {values.size}')
    if values.size != size * size:
        raise GridFileError(
            f'Expected to read {size * size} elements for a {size}x{size} '
            f'grid, but {filename} holds {values.size}.')
    try:
        return GridState.from_cells(values, size)
    except InvalidArgument as error:
        raise GridFileError(f'{filename}: {error}') from error


def write_grid(grid, directory='.', logger=None):
    """Save grid to a file named after its size in directory.

    Returns
    -------
    str
        The path of the written file.
    """
    filename = os.path.join(directory, output_filename(grid.size))
    if logger:
        logger.info(f'writing to: {filename}')
    return write_grid_to(grid, filename)


def write_grid_to(grid, filename):
    """Save grid to exactly the given filename, e.g. for generated inputs."""
    try:
        grid.cells.astype(FILE_DTYPE).tofile(filename)
    except OSError as error:
        raise GridFileError(
            f"Couldn't open file to write: {filename}") from error
    return filename
