"""External identifiers bound to partners.

Invariants held by the store:
- at most one mapping per ``(source, external_id)``
- the reconciliation engine keeps ``(entity_id, source)`` one-to-one by
  updating the most recently modified row instead of inserting a second one
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from partnerlink.domain.model.enums import EntityType, MappingSource


def utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(eq=False, kw_only=True)
class ExternalMapping:
    entity_id: uuid.UUID
    source: MappingSource
    external_id: str
    meta: dict[str, Any] = field(default_factory=dict)
    entity_type: EntityType = EntityType.PARTNER
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def last_modified(self) -> datetime:
        stamp = self.updated_at or self.created_at
        if stamp is None:
            return datetime.min.replace(tzinfo=UTC)
        return stamp if stamp.tzinfo else stamp.replace(tzinfo=UTC)

    def rebind(self, external_id: str, meta: dict[str, Any], *, at: datetime | None = None) -> None:
        """Point this mapping at a new external id with replacement metadata."""

        self.external_id = external_id
        self.meta = meta
        self.updated_at = at or utcnow()
