"""Grid geometry and the periodic-aware distance metric."""

from .distance import pairwise_squared_distances, squared_distance
from .points import grid_points, grid_shape, grid_spacing, linear_index, nearest_grid_index

__all__ = [
    "squared_distance",
    "pairwise_squared_distances",
    "grid_points",
    "grid_shape",
    "grid_spacing",
    "linear_index",
    "nearest_grid_index",
]
