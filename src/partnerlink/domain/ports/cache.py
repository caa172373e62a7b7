"""Port for caches that depend on identifier-to-partner mappings."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from partnerlink.domain.model import MappingSource


@runtime_checkable
class CacheInvalidator(Protocol):
    def invalidate(self, source: MappingSource) -> None: ...


class NullCacheInvalidator:
    """Invalidator used when no downstream cache is wired in."""

    def invalidate(self, source: MappingSource) -> None:
        _ = source
