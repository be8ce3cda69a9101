"""Periodic-aware squared distance on a rectilinear domain.

Along a periodic axis of width W the separation is the minimum image
``min(delta, W - delta)``. Points must lie inside the domain: separations
larger than one width along a periodic axis are not folded back and give
undefined results.
"""

from __future__ import annotations

import numpy as np

from ..core.config import GridSpec
from ..core.types import FloatArray, Point


def squared_distance(spec: GridSpec, p1: Point, p2: Point) -> float:
    """Squared distance between two points of the domain described by ``spec``.

    Args:
        spec: Grid specification providing bounds and periodicity
        p1: First point, one coordinate per axis
        p2: Second point, one coordinate per axis

    Returns:
        Sum over axes of the squared (minimum-image where periodic) separation
    """
    dist_sq = 0.0
    for axis in range(spec.dim):
        delta = abs(float(p2[axis]) - float(p1[axis]))
        if spec.periodicity[axis]:
            width = spec.upper_corner[axis] - spec.lower_corner[axis]
            delta = min(delta, width - delta)
        dist_sq += delta * delta
    return dist_sq


def pairwise_squared_distances(spec: GridSpec, points: FloatArray) -> FloatArray:
    """Matrix of squared distances between all rows of ``points``.

    Vectorised form of :func:`squared_distance`; entry ``[i, j]`` equals
    ``squared_distance(spec, points[i], points[j])``.

    Args:
        spec: Grid specification providing bounds and periodicity
        points: Array of shape (n, dim)

    Returns:
        Symmetric array of shape (n, n)
    """
    points = np.asarray(points, dtype=np.float64)
    if points.ndim != 2 or points.shape[1] != spec.dim:
        raise ValueError(f"points must have shape (n, {spec.dim}), got {points.shape}")

    delta = np.abs(points[:, None, :] - points[None, :, :])
    periodic = np.asarray(spec.periodicity, dtype=bool)
    if periodic.any():
        widths = np.asarray(spec.widths, dtype=np.float64)
        wrapped = np.minimum(delta, widths - delta)
        delta = np.where(periodic, wrapped, delta)

    return np.einsum("ijk,ijk->ij", delta, delta)


__all__ = [
    "squared_distance",
    "pairwise_squared_distances",
]
