"""Covariance construction and truncated eigen-decomposition."""

from .kernels import Kernel, build_covariance, squared_exponential
from .solver import EigenSolver, top_eigenpairs

__all__ = [
    "Kernel",
    "build_covariance",
    "squared_exponential",
    "EigenSolver",
    "top_eigenpairs",
]
