"""Covariance kernels over the grid.

A kernel maps squared (periodic-aware) distances and a length scale to
covariances. Kernels operate elementwise on arrays.
"""

from __future__ import annotations

from collections.abc import Callable

import numpy as np

from ..core.config import GridSpec
from ..core.types import FloatArray
from ..grid.distance import pairwise_squared_distances
from ..grid.points import grid_points

Kernel = Callable[[FloatArray, float], FloatArray]


def squared_exponential(dist_sq: FloatArray, length_scale: float) -> FloatArray:
    """Squared-exponential covariance ``exp(-d^2 / l^2)`` with unit variance."""
    return np.exp(-np.asarray(dist_sq, dtype=np.float64) / (length_scale * length_scale))


def build_covariance(spec: GridSpec, kernel: Kernel = squared_exponential) -> FloatArray:
    """Covariance matrix between all grid points, in linear-index order.

    Returns:
        Symmetric array of shape (total_grid_points, total_grid_points)
    """
    dist_sq = pairwise_squared_distances(spec, grid_points(spec))
    return kernel(dist_sq, spec.length_scale)


__all__ = [
    "Kernel",
    "squared_exponential",
    "build_covariance",
]
