"""Apply ``ready`` suggestions to the mapping store.

Per suggestion, in input order:
- a repeated ``(partner, client id)`` pair within the batch is ``skipped``
- a partner that already has a mapping for the source gets that row updated
  (one mapping per partner per source); otherwise a mapping is inserted
- a uniqueness violation reported by the store counts as a ``conflict`` and
  processing continues

Dry runs walk the same decisions against the in-memory snapshot without
touching the store; a client id already held by another mapping (including
one planned earlier in the batch) is reported as a ``conflict``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from partnerlink.domain.marketplaces import infer_marketplace_code, normalize_marketplace_code
from partnerlink.domain.model import ExternalMapping, MappingSource, utcnow
from partnerlink.domain.ports.cache import NullCacheInvalidator

from .contracts import ApplyOutcome, SuggestionStatus, SyncCounts
from .normalize import normalize_key

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping
    from datetime import datetime
    from uuid import UUID

    from partnerlink.domain.model import ReferenceSheet
    from partnerlink.domain.ports.cache import CacheInvalidator
    from partnerlink.domain.ports.persistence import ExternalMappingRepository

    from .classify import MappingSnapshot
    from .contracts import Suggestion


log = logging.getLogger(__name__)

REFERENCE_CONTEXT_KEY = "reference_sheet"
MARKETPLACE_INFERENCE_SOURCE = "reference_sheet_inference"


def merge_reference_metadata(
    existing: Mapping[str, Any] | None,
    sheet: ReferenceSheet,
    suggestion: Suggestion,
    *,
    synced_at: datetime,
) -> dict[str, Any]:
    """Return ``existing`` with the reference context block overwritten.

    Keys outside the reference block are preserved.
    """

    metadata: dict[str, Any] = dict(existing) if existing else {}
    marketplace_code = infer_marketplace_code(
        suggestion.client_id,
        suggestion.client_name,
        suggestion.brand,
    )
    metadata[REFERENCE_CONTEXT_KEY] = {
        "spreadsheet_id": sheet.spreadsheet_id,
        "tab_name": sheet.tab.title,
        "tab_gid": sheet.tab.sheet_id,
        "row_number": suggestion.row_number,
        "brand": suggestion.brand,
        "client_id": suggestion.client_id,
        "client_name": suggestion.client_name,
        "marketplace_code": marketplace_code,
        "synced_at": synced_at.isoformat(),
    }
    if marketplace_code:
        metadata["marketplace_code"] = marketplace_code
        metadata["marketplace_source"] = MARKETPLACE_INFERENCE_SOURCE
    return metadata


def mapping_marketplace_code(mapping: ExternalMapping) -> str | None:
    """Marketplace of a stored mapping.

    An explicit top-level ``marketplace_code`` wins, then the code recorded in
    the reference block, then inference from the client id itself.
    """

    metadata = mapping.meta or {}
    candidates = [metadata.get("marketplace_code")]
    block = metadata.get(REFERENCE_CONTEXT_KEY)
    if isinstance(block, dict):
        candidates.append(block.get("marketplace_code"))
    for value in candidates:
        if isinstance(value, str):
            code = normalize_marketplace_code(value)
            if code is not None:
                return code
    return infer_marketplace_code(mapping.external_id)


@dataclass(slots=True)
class SyncReport:
    counts: SyncCounts = field(default_factory=SyncCounts)
    outcomes: dict[int, ApplyOutcome] = field(default_factory=dict)
    dry_run: bool = False


@dataclass(slots=True)
class MappingSynchronizer:
    """Write ready suggestions for one source, sequentially."""

    mappings: ExternalMappingRepository
    snapshot: MappingSnapshot
    source: MappingSource = MappingSource.WAREHOUSE
    cache: CacheInvalidator = field(default_factory=NullCacheInvalidator)
    commit: Callable[[], None] | None = None
    clock: Callable[[], datetime] = utcnow

    def sync(
        self,
        suggestions: Iterable[Suggestion],
        *,
        sheet: ReferenceSheet,
        dry_run: bool = False,
    ) -> SyncReport:
        report = SyncReport(dry_run=dry_run)
        processed: set[tuple[UUID, str]] = set()

        for suggestion in suggestions:
            if suggestion.status is not SuggestionStatus.READY:
                continue
            partner_id = suggestion.matched_partner_id
            if partner_id is None:
                continue

            dedupe_key = (partner_id, normalize_key(suggestion.client_id))
            if dedupe_key in processed:
                outcome = ApplyOutcome.SKIPPED
                log.debug(
                    "Row %s: duplicate of an earlier row for partner %s, skipping",
                    suggestion.row_number,
                    partner_id,
                )
            else:
                processed.add(dedupe_key)
                outcome = self._apply_one(suggestion, partner_id, sheet=sheet, dry_run=dry_run)

            report.outcomes[suggestion.row_number] = outcome
            report.counts.record(outcome)

        if not dry_run and report.counts.applied > 0:
            self.cache.invalidate(self.source)

        log.info(
            "Mapping sync finished (dry_run=%s): inserted=%s updated=%s skipped=%s conflicts=%s",
            dry_run,
            report.counts.inserted,
            report.counts.updated,
            report.counts.skipped,
            report.counts.conflicts,
        )
        return report

    def _apply_one(
        self,
        suggestion: Suggestion,
        partner_id: UUID,
        *,
        sheet: ReferenceSheet,
        dry_run: bool,
    ) -> ApplyOutcome:
        existing = self.snapshot.latest_for_partner(partner_id)
        previous_external_id = existing.external_id if existing else None
        now = self.clock()
        base_metadata = existing.meta if existing else suggestion.current_mapping_metadata
        metadata = merge_reference_metadata(base_metadata, sheet, suggestion, synced_at=now)

        if existing is not None:
            candidate = ExternalMapping(
                id=existing.id,
                entity_id=partner_id,
                source=self.source,
                external_id=suggestion.client_id,
                meta=metadata,
                created_at=existing.created_at,
                updated_at=now,
            )
            planned = ApplyOutcome.UPDATED
        else:
            candidate = ExternalMapping(
                entity_id=partner_id,
                source=self.source,
                external_id=suggestion.client_id,
                meta=metadata,
                created_at=now,
                updated_at=now,
            )
            planned = ApplyOutcome.INSERTED

        if dry_run:
            if self._taken_by_other(candidate):
                log.info(
                    "Row %s: client id %r would collide with an existing mapping under %s",
                    suggestion.row_number,
                    suggestion.client_id,
                    self.source,
                )
                return ApplyOutcome.CONFLICT
            self.snapshot.record(
                candidate,
                previous_external_id=previous_external_id,
            )
            return planned

        result = self.mappings.upsert(candidate)
        if result.conflict or result.mapping is None:
            log.warning(
                "Row %s: client id %r is already mapped under %s, counted as conflict",
                suggestion.row_number,
                suggestion.client_id,
                self.source,
            )
            return ApplyOutcome.CONFLICT

        if self.commit is not None:
            self.commit()
        self.snapshot.record(
            result.mapping,
            previous_external_id=previous_external_id,
        )
        log.debug(
            "Row %s: %s mapping %s -> %r",
            suggestion.row_number,
            planned,
            partner_id,
            suggestion.client_id,
        )
        return ApplyOutcome.INSERTED if result.created else ApplyOutcome.UPDATED

    def _taken_by_other(self, candidate: ExternalMapping) -> bool:
        """Whether the store would reject ``candidate`` on ``(source, external_id)``.

        Mirrors the exact-match uniqueness of the store, so ids differing only
        in case do not collide here either.
        """

        owner = self.snapshot.owner_of(candidate.external_id)
        return (
            owner is not None
            and owner.id != candidate.id
            and owner.external_id == candidate.external_id
        )
