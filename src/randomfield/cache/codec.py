"""Binary cache files for spectral bases.

A cache file has no magic number or version tag. Its layout is fixed by
the spatial dimension D, all values little-endian:

    header
        D x float64   lower corner
        D x float64   upper corner
        D x uint32    grid point counts
        D x uint8     periodicity flags (0 or 1)
        uint32        number of eigenvalues K
        float64       length scale
    K x float64       eigenvalues
    N*K x float64     eigenvectors, column-major (N = total grid points)

Floats are stored as raw IEEE 754 bytes, so a save followed by a load
reproduces every value exactly. On load the file length must match the
header exactly; anything else is reported as a corrupt cache.
"""

from __future__ import annotations

import os
import struct
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from pydantic import ValidationError

from ..core.config import GridSpec
from ..core.errors import CacheCorruptError, CacheIOError, UnsupportedDimensionError
from ..core.logging import get_logger
from ..core.types import SUPPORTED_DIMS, FloatArray

logger = get_logger(__name__)

FLOAT_DTYPE = np.dtype("<f8")


@dataclass
class SpectralBasis:
    """Truncated eigen-decomposition of a grid covariance matrix.

    Attributes:
        eigenvalues: Shape (K,), descending
        eigenvectors: Shape (N, K); column j pairs with ``eigenvalues[j]``
    """

    eigenvalues: FloatArray
    eigenvectors: FloatArray

    @property
    def num_eigenvalues(self) -> int:
        return int(self.eigenvalues.shape[0])

    @property
    def num_grid_points(self) -> int:
        return int(self.eigenvectors.shape[0])

    def check_matches(self, spec: GridSpec) -> None:
        """Raise ValueError unless the array shapes agree with ``spec``."""
        k = spec.num_eigenvalues
        n = spec.total_grid_points
        if self.eigenvalues.shape != (k,):
            raise ValueError(f"eigenvalues must have shape ({k},), got {self.eigenvalues.shape}")
        if self.eigenvectors.shape != (n, k):
            raise ValueError(
                f"eigenvectors must have shape ({n}, {k}), got {self.eigenvectors.shape}"
            )


def _header_struct(dim: int) -> struct.Struct:
    if dim not in SUPPORTED_DIMS:
        raise UnsupportedDimensionError(dim)
    return struct.Struct(f"<{dim}d{dim}d{dim}I{dim}BId")


def header_size(dim: int) -> int:
    """Size in bytes of the header for a ``dim``-dimensional grid."""
    return _header_struct(dim).size


def payload_size(spec: GridSpec) -> int:
    """Size in bytes of the eigenvalue and eigenvector arrays for ``spec``."""
    k = spec.num_eigenvalues
    return FLOAT_DTYPE.itemsize * (k + spec.total_grid_points * k)


def encode_header(spec: GridSpec) -> bytes:
    return _header_struct(spec.dim).pack(
        *spec.lower_corner,
        *spec.upper_corner,
        *spec.num_grid_pts,
        *(1 if p else 0 for p in spec.periodicity),
        spec.num_eigenvalues,
        spec.length_scale,
    )


def decode_header(data: bytes, dim: int) -> GridSpec:
    """Rebuild a GridSpec from header bytes.

    Raises:
        CacheCorruptError: If the bytes are short or describe an invalid grid
    """
    layout = _header_struct(dim)
    if len(data) != layout.size:
        raise CacheCorruptError(
            f"Header for a {dim}D grid needs {layout.size} bytes, got {len(data)}"
        )

    values = layout.unpack(data)
    lower = values[0:dim]
    upper = values[dim : 2 * dim]
    counts = values[2 * dim : 3 * dim]
    flags = values[3 * dim : 4 * dim]
    num_eigenvalues, length_scale = values[4 * dim :]

    if any(flag not in (0, 1) for flag in flags):
        raise CacheCorruptError(f"Periodicity flags must be 0 or 1, got {flags}")

    try:
        return GridSpec(
            lower_corner=lower,
            upper_corner=upper,
            num_grid_pts=counts,
            periodicity=tuple(bool(flag) for flag in flags),
            num_eigenvalues=num_eigenvalues,
            length_scale=length_scale,
        )
    except ValidationError as e:
        raise CacheCorruptError(f"Header does not describe a valid grid: {e}") from e


def save_cache(path: str | Path, spec: GridSpec, basis: SpectralBasis) -> None:
    """Write ``spec`` and ``basis`` to ``path``, replacing any existing file.

    The data goes to a sibling ``.tmp`` file that replaces ``path`` only once
    fully written, so a failed write leaves any previous entry untouched and
    no partial file at ``path``. The parent directory must already exist.

    Raises:
        ValueError: If the basis shape does not match the spec
        CacheIOError: If the file cannot be opened or written
    """
    path = Path(path)
    basis.check_matches(spec)

    header = encode_header(spec)
    eigenvalues = np.ascontiguousarray(basis.eigenvalues, dtype=FLOAT_DTYPE).tobytes()
    eigenvectors = np.asarray(basis.eigenvectors, dtype=FLOAT_DTYPE).tobytes(order="F")

    tmp_path = path.with_name(path.name + ".tmp")
    try:
        with open(tmp_path, "wb") as f:
            f.write(header)
            f.write(eigenvalues)
            f.write(eigenvectors)
        os.replace(tmp_path, path)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        raise CacheIOError(f"Cannot write cache file {path}: {e}") from e

    logger.debug(
        "Wrote cache file",
        {"path": str(path), "bytes": len(header) + len(eigenvalues) + len(eigenvectors)},
    )


def read_header(path: str | Path, dim: int) -> GridSpec:
    """Read only the header of a cache file."""
    path = Path(path)
    try:
        with open(path, "rb") as f:
            data = f.read(header_size(dim))
    except OSError as e:
        raise CacheIOError(f"Cannot read cache file {path}: {e}") from e
    return decode_header(data, dim)


def load_cache(path: str | Path, dim: int) -> tuple[GridSpec, SpectralBasis]:
    """Read a cache file written for a ``dim``-dimensional grid.

    Returns:
        The stored grid specification and spectral basis

    Raises:
        CacheIOError: If the file cannot be opened or read
        CacheCorruptError: If the header is invalid or the file length does
            not match the header
    """
    path = Path(path)
    size = header_size(dim)

    try:
        with open(path, "rb") as f:
            header = f.read(size)
            payload = f.read()
    except OSError as e:
        raise CacheIOError(f"Cannot read cache file {path}: {e}") from e

    spec = decode_header(header, dim)

    expected = payload_size(spec)
    if len(payload) != expected:
        raise CacheCorruptError(
            f"Cache file {path} has {len(payload)} payload bytes, header implies {expected}"
        )

    k = spec.num_eigenvalues
    n = spec.total_grid_points
    values = np.frombuffer(payload, dtype=FLOAT_DTYPE)
    eigenvalues = values[:k].astype(np.float64)
    eigenvectors = values[k:].reshape((n, k), order="F").astype(np.float64)

    logger.debug("Read cache file", {"path": str(path), "bytes": size + len(payload)})

    return spec, SpectralBasis(eigenvalues=eigenvalues, eigenvectors=eigenvectors)


__all__ = [
    "SpectralBasis",
    "header_size",
    "payload_size",
    "encode_header",
    "decode_header",
    "save_cache",
    "read_header",
    "load_cache",
]
