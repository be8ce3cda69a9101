"""Deterministic cache file names derived from generation parameters.

Floating-point fields are rendered with exactly three decimals, so two
parameter sets that differ only beyond the third decimal share a cache
entry. This is an accepted approximation that keeps names short and
independent of platform float formatting.
"""

from __future__ import annotations

from pathlib import Path

from ..core.config import GridSpec
from ..core.errors import UnsupportedDimensionError

CACHE_DIR_NAME = "CachedRandomFields"
CACHE_EXTENSION = ".rfg"
DELIMITER = "_"

_AXIS_PREFIXES = {1: "x", 2: "xy", 3: "xyz"}


def _fixed(value: float) -> str:
    return f"{value:.3f}"


def axis_prefix(dim: int) -> str:
    """Axis label prefix for a spatial dimension ("x", "xy" or "xyz")."""
    try:
        return _AXIS_PREFIXES[dim]
    except KeyError:
        raise UnsupportedDimensionError(dim) from None


def encode_key(spec: GridSpec) -> str:
    """Relative cache path for ``spec``.

    Fields appear grouped by kind across all axes: lower corners, upper
    corners, grid counts, periodicity flags, then the eigenvalue count and
    the length scale.

    Example:
        A 2D grid on [0, 10]^2 with 5x5 points, periodic in x only, three
        eigenvalues and length scale 1.5 encodes to
        ``CachedRandomFields/xy_0.000_0.000_10.000_10.000_5_5_1_0_3_1.500.rfg``.

    Raises:
        UnsupportedDimensionError: If the spec is not 1, 2 or 3 dimensional
    """
    tokens = [axis_prefix(spec.dim)]
    tokens += [_fixed(v) for v in spec.lower_corner]
    tokens += [_fixed(v) for v in spec.upper_corner]
    tokens += [str(int(n)) for n in spec.num_grid_pts]
    tokens += ["1" if p else "0" for p in spec.periodicity]
    tokens.append(str(int(spec.num_eigenvalues)))
    tokens.append(_fixed(spec.length_scale))

    return f"{CACHE_DIR_NAME}/{DELIMITER.join(tokens)}{CACHE_EXTENSION}"


def cache_path(spec: GridSpec, output_root: str | Path) -> Path:
    """Absolute cache path for ``spec`` under ``output_root``."""
    return (Path(output_root) / encode_key(spec)).resolve()


__all__ = [
    "CACHE_DIR_NAME",
    "CACHE_EXTENSION",
    "DELIMITER",
    "axis_prefix",
    "encode_key",
    "cache_path",
]
