"""Ports for reading and writing the partner registry and its mappings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from partnerlink.domain.model import ExternalMapping, MappingSource, Partner


@dataclass(slots=True, frozen=True)
class UpsertResult:
    """Outcome of a single mapping write.

    ``conflict`` is set when the store refused the write because another
    mapping already owns ``(source, external_id)``; ``mapping`` is then ``None``.
    """

    mapping: ExternalMapping | None
    conflict: bool = False
    created: bool = False


@runtime_checkable
class PartnerRepository(Protocol):
    """Read access to the partner registry."""

    def list_all(self) -> Sequence[Partner]: ...

    def get(self, partner_id: UUID) -> Partner | None: ...

    def add(self, partner: Partner) -> None: ...


@runtime_checkable
class ExternalMappingRepository(Protocol):
    """Persistence contract for partner external identifier mappings."""

    def list_by_source(self, source: MappingSource) -> Sequence[ExternalMapping]: ...

    def upsert(self, mapping: ExternalMapping) -> UpsertResult: ...
