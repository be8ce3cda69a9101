"""Random field generator on a uniform rectilinear grid.

Construction derives the cache path from the grid specification and loads
the spectral basis if a cache file exists there. Otherwise the generator
stays without a basis until ``compute_spectral_basis`` is called, after
which ``save_to_cache`` persists it for later runs.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

import numpy as np

from .cache.codec import SpectralBasis, load_cache, save_cache
from .cache.key import cache_path, encode_key
from .cache.policy import CachePolicy, TrustCachePolicy, make_policy
from .core.config import GeneratorConfig, GridSpec
from .core.errors import GeneratorStateError
from .core.logging import get_logger
from .core.types import FloatArray, Point
from .grid.distance import squared_distance
from .grid.points import linear_index, nearest_grid_index
from .spectral.kernels import Kernel, build_covariance, squared_exponential
from .spectral.solver import EigenSolver, top_eigenpairs

logger = get_logger(__name__)


class GeneratorState(str, Enum):
    """Where the generator's spectral basis came from."""

    CACHE_HIT = "cache_hit"
    CACHE_MISS = "cache_miss"
    COMPUTED = "computed"


class UniformGridRandomFieldGenerator:
    """Gaussian random field sampler backed by a cached spectral basis.

    Args:
        spec: Grid and truncation parameters
        output_root: Directory containing the ``CachedRandomFields`` cache
        policy: Decides which spec is kept when a cache file is loaded
        kernel: Covariance kernel used by ``compute_spectral_basis``
        solver: Eigensolver used by ``compute_spectral_basis``

    Raises:
        CacheIOError: If an existing cache file cannot be read
        CacheCorruptError: If an existing cache file is malformed
        CacheMismatchError: If a strict policy rejects the cached header
    """

    def __init__(
        self,
        spec: GridSpec,
        output_root: str | Path,
        policy: CachePolicy | None = None,
        kernel: Kernel = squared_exponential,
        solver: EigenSolver = top_eigenpairs,
    ):
        self.spec = spec
        self.output_root = Path(output_root)
        self.policy = policy if policy is not None else TrustCachePolicy()
        self.kernel = kernel
        self.solver = solver
        self.basis: SpectralBasis | None = None

        path = self.cache_path
        if path.exists():
            self.load_from_cache(path)
            logger.info("Loaded spectral basis from cache", {"path": str(path)})
        else:
            self.state = GeneratorState.CACHE_MISS
            logger.info("No cached spectral basis", {"path": str(path)})

    @classmethod
    def from_config(cls, cfg: GeneratorConfig, **kwargs) -> UniformGridRandomFieldGenerator:
        return cls(cfg.grid, cfg.output_root, policy=make_policy(cfg.cache_policy), **kwargs)

    @property
    def cache_key(self) -> str:
        return encode_key(self.spec)

    @property
    def cache_path(self) -> Path:
        return cache_path(self.spec, self.output_root)

    @property
    def has_basis(self) -> bool:
        return self.basis is not None

    def squared_distance(self, p1: Point, p2: Point) -> float:
        """Periodic-aware squared distance between two points of the domain."""
        return squared_distance(self.spec, p1, p2)

    def load_from_cache(self, path: str | Path) -> None:
        """Replace the spec and basis with the contents of a cache file.

        Leaves the generator in the ``CACHE_HIT`` state.
        """
        loaded_spec, basis = load_cache(path, self.spec.dim)
        self.spec = self.policy.accept(self.spec, loaded_spec)
        self.basis = basis
        self.state = GeneratorState.CACHE_HIT

    def compute_spectral_basis(self) -> SpectralBasis:
        """Build the grid covariance and keep its top eigenpairs.

        Any basis already held, including one loaded from the cache, is
        replaced.
        """
        logger.info(
            "Computing spectral basis",
            {
                "grid_points": self.spec.total_grid_points,
                "num_eigenvalues": self.spec.num_eigenvalues,
            },
        )
        covariance = build_covariance(self.spec, self.kernel)
        eigenvalues, eigenvectors = self.solver(covariance, self.spec.num_eigenvalues)

        basis = SpectralBasis(
            eigenvalues=np.asarray(eigenvalues, dtype=np.float64),
            eigenvectors=np.asarray(eigenvectors, dtype=np.float64),
        )
        basis.check_matches(self.spec)

        self.basis = basis
        self.state = GeneratorState.COMPUTED
        logger.info(
            "Computed spectral basis",
            {"largest_eigenvalue": float(basis.eigenvalues[0])},
        )
        return basis

    def save_to_cache(self) -> Path:
        """Write the current spec and basis to the key-derived path.

        Creates the cache directory if needed and overwrites any existing
        file for this key.

        Returns:
            Path of the written cache file
        """
        basis = self._require_basis()
        path = self.cache_path
        path.parent.mkdir(parents=True, exist_ok=True)
        save_cache(path, self.spec, basis)
        logger.info("Saved spectral basis to cache", {"path": str(path)})
        return path

    def sample_random_field(self, rng: np.random.Generator | None = None) -> FloatArray:
        """Draw one field realisation at the grid points.

        Returns:
            Flat array of length ``total_grid_points`` in linear-index order
        """
        basis = self._require_basis()
        if rng is None:
            rng = np.random.default_rng()
        xi = rng.standard_normal(basis.num_eigenvalues)
        scale = np.sqrt(np.clip(basis.eigenvalues, 0.0, None))
        return basis.eigenvectors @ (scale * xi)

    def reshape_to_grid(self, field: FloatArray) -> FloatArray:
        """View a flat field as an array of shape ``num_grid_pts``."""
        return np.asarray(field).reshape(self.spec.num_grid_pts, order="F")

    def interpolate(self, field: FloatArray, location: Point) -> float:
        """Field value at the grid point nearest to ``location``."""
        field = np.asarray(field)
        if field.shape != (self.spec.total_grid_points,):
            raise ValueError(
                f"field must have shape ({self.spec.total_grid_points},), got {field.shape}"
            )
        index = nearest_grid_index(self.spec, location)
        return float(field[linear_index(self.spec, index)])

    def _require_basis(self) -> SpectralBasis:
        if self.basis is None:
            raise GeneratorStateError(
                "No spectral basis: call compute_spectral_basis() before saving or sampling"
            )
        return self.basis


__all__ = [
    "GeneratorState",
    "UniformGridRandomFieldGenerator",
]
