"""Type definitions and aliases for random field generation."""

from collections.abc import Sequence
from typing import Union

import numpy as np
import numpy.typing as npt

FloatArray = npt.NDArray[np.float64]

# Coordinate types
Point = Union[Sequence[float], FloatArray]
Corner = tuple[float, ...]
GridCounts = tuple[int, ...]
Periodicity = tuple[bool, ...]

SUPPORTED_DIMS = (1, 2, 3)

# Grid counts and the eigenvalue count are stored as uint32 in cache headers
MAX_COUNT = 2**32 - 1

__all__ = [
    "FloatArray",
    "Point",
    "Corner",
    "GridCounts",
    "Periodicity",
    "SUPPORTED_DIMS",
    "MAX_COUNT",
]
