"""Module with fast, Numba-accelerated, compiled math routines.

This includes multiple submodules:
- `base.py` includes basic column statistics, as found in numpy
- `linalg.py` includes linear algebra routines, as found in numpy.linalg
- `decomposition.py` includes the ordered singular value decomposition
"""

# Expose submodules
from . import decomposition, linalg

# Expose all base functions directly
from .base import *
