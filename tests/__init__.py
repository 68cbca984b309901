"""Tests for this project.

The kernel tests need a CUDA device. Unless the environment says otherwise,
run them on Numba's CUDA simulator so they work on any machine. This has to
happen before anything imports numba.
"""

import os

os.environ.setdefault('NUMBA_ENABLE_CUDASIM', '1')
