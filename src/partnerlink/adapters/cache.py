"""In-process cache of client id -> partner name lookups per mapping source."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from partnerlink.domain.reconciliation.normalize import normalize_key

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from partnerlink.domain.model import MappingSource

log = logging.getLogger(__name__)

type ClientNameLoader = Callable[[MappingSource], Mapping[str, str]]

DEFAULT_TTL_SECONDS = 300.0


@dataclass(slots=True)
class _Entry:
    names: dict[str, str]
    loaded_at: float


@dataclass(slots=True)
class ClientNameCache:
    """Lazily loaded, TTL-bounded view of the mappings of each source.

    Keys are normalized external ids. A reconciliation run that wrote
    mappings calls ``invalidate`` so the next lookup reloads.
    """

    loader: ClientNameLoader
    ttl_seconds: float = DEFAULT_TTL_SECONDS
    clock: Callable[[], float] = time.monotonic
    _entries: dict[MappingSource, _Entry] = field(default_factory=dict)

    def get(self, source: MappingSource) -> dict[str, str]:
        entry = self._entries.get(source)
        now = self.clock()
        if entry is None or now - entry.loaded_at >= self.ttl_seconds:
            names = {normalize_key(key): value for key, value in self.loader(source).items()}
            entry = _Entry(names=names, loaded_at=now)
            self._entries[source] = entry
            log.debug("Loaded %d client names for %s", len(names), source)
        return entry.names

    def lookup(self, source: MappingSource, external_id: str) -> str | None:
        return self.get(source).get(normalize_key(external_id))

    def invalidate(self, source: MappingSource) -> None:
        if self._entries.pop(source, None) is not None:
            log.debug("Invalidated client names for %s", source)

    def clear(self) -> None:
        self._entries.clear()
