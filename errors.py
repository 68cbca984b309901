'''Exceptions raised while setting up or running Game of Life simulations.

Every failure in this project is fatal to the run that raised it. Nothing is
retried, since each generation is a pure recomputation of the one before, so
these exceptions simply propagate up to the command line, which reports them.
'''


class GameOfLifeError(Exception):
    '''Base class for all errors raised by this project.'''


class OutOfMemory(GameOfLifeError):
    '''A host or device grid buffer could not be allocated.'''


class InvalidArgument(GameOfLifeError):
    '''A caller passed a grid size, step count, or buffer that can't be used.'''


class DecompositionMismatch(GameOfLifeError):
    '''A kernel launch would not cover every cell of the grid.'''


class CellAccountingError(GameOfLifeError):
    '''Births, deaths and unchanged cells didn't add up to the grid size.

    This indicates a bug in the update engine, not bad input.
    '''


class GridFileError(GameOfLifeError):
    '''A grid file could not be read or written as expected.'''
