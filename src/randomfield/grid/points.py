"""Grid point layout.

Points are numbered with the first axis varying fastest, so the linear
index of ``(i0, i1, i2)`` is ``i0 + n0 * (i1 + n1 * i2)``. A periodic axis
excludes the upper corner, which coincides with the lower one; a
non-periodic axis spans both bounds.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from ..core.config import GridSpec
from ..core.types import FloatArray, Point


def grid_shape(spec: GridSpec) -> tuple[int, ...]:
    return tuple(spec.num_grid_pts)


def grid_spacing(spec: GridSpec) -> tuple[float, ...]:
    """Distance between neighbouring grid points along each axis.

    A non-periodic axis with a single point reports its full width.
    """
    spacing = []
    for width, n, periodic in zip(spec.widths, spec.num_grid_pts, spec.periodicity):
        if periodic:
            spacing.append(width / n)
        elif n > 1:
            spacing.append(width / (n - 1))
        else:
            spacing.append(width)
    return tuple(spacing)


def axis_coordinates(spec: GridSpec, axis: int) -> FloatArray:
    """Coordinates of the grid points along one axis."""
    n = spec.num_grid_pts[axis]
    step = grid_spacing(spec)[axis]
    return spec.lower_corner[axis] + step * np.arange(n, dtype=np.float64)


def grid_points(spec: GridSpec) -> FloatArray:
    """All grid point coordinates, shape (total_grid_points, dim), in linear-index order."""
    axes = [axis_coordinates(spec, axis) for axis in range(spec.dim)]
    mesh = np.meshgrid(*axes, indexing="ij")
    return np.stack([m.ravel(order="F") for m in mesh], axis=1)


def linear_index(spec: GridSpec, index: Sequence[int]) -> int:
    """Linear index of a multi-index, first axis fastest."""
    if len(index) != spec.dim:
        raise ValueError(f"Expected {spec.dim} indices, got {len(index)}")
    result = 0
    for axis in reversed(range(spec.dim)):
        i = int(index[axis])
        n = spec.num_grid_pts[axis]
        if not 0 <= i < n:
            raise IndexError(f"Index {i} out of range for axis {axis} with {n} points")
        result = result * n + i
    return result


def nearest_grid_index(spec: GridSpec, location: Point) -> tuple[int, ...]:
    """Multi-index of the grid point nearest to ``location``.

    Periodic axes wrap around; non-periodic axes clamp to the boundary.
    """
    spacing = grid_spacing(spec)
    index = []
    for axis in range(spec.dim):
        n = spec.num_grid_pts[axis]
        offset = (float(location[axis]) - spec.lower_corner[axis]) / spacing[axis]
        i = int(np.floor(offset + 0.5))
        if spec.periodicity[axis]:
            i %= n
        else:
            i = min(max(i, 0), n - 1)
        index.append(i)
    return tuple(index)


__all__ = [
    "grid_shape",
    "grid_spacing",
    "axis_coordinates",
    "grid_points",
    "linear_index",
    "nearest_grid_index",
]
