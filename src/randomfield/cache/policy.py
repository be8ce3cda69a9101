"""Policies deciding which grid specification wins on a cache hit.

The default trusts the cached header unconditionally, even where it
disagrees with the requested parameters (they can only differ below the
key's three-decimal resolution). The strict policy rejects any difference.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..core.config import CachePolicyKind, GridSpec
from ..core.errors import CacheMismatchError


@runtime_checkable
class CachePolicy(Protocol):
    def accept(self, requested: GridSpec, loaded: GridSpec) -> GridSpec:
        """Return the specification the generator adopts."""
        ...


class TrustCachePolicy:
    """Adopt the cached header as authoritative."""

    def accept(self, requested: GridSpec, loaded: GridSpec) -> GridSpec:
        return loaded


class StrictCachePolicy:
    """Reject cached headers that differ from the request in any field."""

    def accept(self, requested: GridSpec, loaded: GridSpec) -> GridSpec:
        mismatched = [
            name
            for name in GridSpec.model_fields
            if getattr(requested, name) != getattr(loaded, name)
        ]
        if mismatched:
            details = ", ".join(
                f"{name}: requested {getattr(requested, name)!r}, cached {getattr(loaded, name)!r}"
                for name in mismatched
            )
            raise CacheMismatchError(f"Cached header disagrees with request ({details})")
        return loaded


def make_policy(kind: CachePolicyKind | str) -> CachePolicy:
    kind = CachePolicyKind(kind)
    if kind is CachePolicyKind.STRICT:
        return StrictCachePolicy()
    return TrustCachePolicy()


__all__ = [
    "CachePolicy",
    "TrustCachePolicy",
    "StrictCachePolicy",
    "make_policy",
]
