"""Top-K eigenpairs of a dense symmetric matrix."""

from __future__ import annotations

from collections.abc import Callable

import numpy as np
import scipy.linalg

from ..core.types import FloatArray

EigenSolver = Callable[[FloatArray, int], tuple[FloatArray, FloatArray]]


def top_eigenpairs(matrix: FloatArray, k: int) -> tuple[FloatArray, FloatArray]:
    """Largest ``k`` eigenvalues of a symmetric matrix and their eigenvectors.

    Args:
        matrix: Symmetric array of shape (n, n)
        k: Number of eigenpairs, 1 <= k <= n

    Returns:
        Eigenvalues of shape (k,) in descending order and eigenvectors of
        shape (n, k) with column j paired to eigenvalue j
    """
    matrix = np.asarray(matrix, dtype=np.float64)
    n = matrix.shape[0]
    if matrix.shape != (n, n):
        raise ValueError(f"matrix must be square, got {matrix.shape}")
    if not 1 <= k <= n:
        raise ValueError(f"k must be between 1 and {n}, got {k}")

    eigenvalues, eigenvectors = scipy.linalg.eigh(matrix, subset_by_index=[n - k, n - 1])

    # eigh returns ascending order
    order = np.argsort(eigenvalues)[::-1]
    return eigenvalues[order], np.ascontiguousarray(eigenvectors[:, order])


__all__ = [
    "EigenSolver",
    "top_eigenpairs",
]
