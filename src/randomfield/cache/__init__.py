"""Cache keys, the binary cache file format and cache trust policies."""

from .codec import SpectralBasis, load_cache, save_cache
from .key import CACHE_DIR_NAME, CACHE_EXTENSION, cache_path, encode_key
from .policy import CachePolicy, StrictCachePolicy, TrustCachePolicy, make_policy

__all__ = [
    "SpectralBasis",
    "load_cache",
    "save_cache",
    "CACHE_DIR_NAME",
    "CACHE_EXTENSION",
    "cache_path",
    "encode_key",
    "CachePolicy",
    "StrictCachePolicy",
    "TrustCachePolicy",
    "make_policy",
]
