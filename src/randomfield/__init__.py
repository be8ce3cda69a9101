"""Uniform-grid Gaussian random field generation.

Builds a truncated Karhunen-Loeve basis for a squared-exponential covariance
on a 1D, 2D or 3D rectilinear grid and caches it on disk keyed by the
generation parameters.
"""

__version__ = "0.1.0"

__all__ = [
    "cache",
    "cli",
    "core",
    "generator",
    "grid",
    "spectral",
]
