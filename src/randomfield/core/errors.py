"""Custom exception types for random field generation."""


class RandomFieldError(Exception):
    """Base exception for all random field errors."""

    pass


class ConfigError(RandomFieldError):
    """Configuration-related errors."""

    pass


class UnsupportedDimensionError(RandomFieldError):
    """Spatial dimension outside {1, 2, 3}."""

    def __init__(self, dim: int):
        super().__init__(f"Unsupported spatial dimension {dim}; expected 1, 2 or 3")
        self.dim = dim


class CacheError(RandomFieldError):
    """Base class for cache file errors."""

    pass


class CacheIOError(CacheError):
    """Cache file could not be opened for reading or writing."""

    pass


class CacheCorruptError(CacheError):
    """Cache file contents do not match the layout implied by its header.

    Recoverable by deleting the file and recomputing the basis.
    """

    pass


class CacheMismatchError(CacheError):
    """Cached header disagrees with the requested parameters."""

    pass


class GeneratorStateError(RandomFieldError):
    """Operation requires a spectral basis that has not been loaded or computed."""

    pass


__all__ = [
    "RandomFieldError",
    "ConfigError",
    "UnsupportedDimensionError",
    "CacheError",
    "CacheIOError",
    "CacheCorruptError",
    "CacheMismatchError",
    "GeneratorStateError",
]
