"""Classify reference rows into reconciliation suggestions.

Check order per row (first hit wins):

1. ``missing_data``       brand or client id blank
2. ``ambiguous_partner``  matcher found a tie
3. ``partner_not_found``  matcher found nothing
4. ``client_conflict``    client id already bound to a different partner
5. ``already_mapped``     matched partner already carries this client id
6. ``ready``

The conflict check runs before the already-mapped check: a client id bound to
another partner is an integrity problem even when the matched partner also
carries it.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .contracts import Suggestion, SuggestionStatus
from .normalize import normalize_key

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from uuid import UUID

    from partnerlink.domain.model import ExternalMapping, InputRow

    from .contracts import MatchResult
    from .index import CandidateIndex


log = logging.getLogger(__name__)


@dataclass(slots=True)
class MappingSnapshot:
    """In-memory view of the mappings of one source.

    ``by_partner_external`` and ``by_external`` are keyed on normalized
    external ids. The synchronizer updates the snapshot after every write so
    later rows of the same batch see earlier writes.
    """

    by_partner: dict[UUID, list[ExternalMapping]] = field(default_factory=dict)
    by_external: dict[str, ExternalMapping] = field(default_factory=dict)
    by_partner_external: dict[tuple[UUID, str], ExternalMapping] = field(default_factory=dict)

    @classmethod
    def build(cls, mappings: Iterable[ExternalMapping]) -> MappingSnapshot:
        snapshot = cls()
        by_partner: defaultdict[UUID, list[ExternalMapping]] = defaultdict(list)
        for mapping in mappings:
            by_partner[mapping.entity_id].append(mapping)
            key = normalize_key(mapping.external_id)
            snapshot.by_external[key] = mapping
            snapshot.by_partner_external[(mapping.entity_id, key)] = mapping
        snapshot.by_partner = dict(by_partner)
        return snapshot

    def owner_of(self, external_id: str) -> ExternalMapping | None:
        return self.by_external.get(normalize_key(external_id))

    def for_partner_external(self, partner_id: UUID, external_id: str) -> ExternalMapping | None:
        return self.by_partner_external.get((partner_id, normalize_key(external_id)))

    def latest_for_partner(self, partner_id: UUID) -> ExternalMapping | None:
        """Most recently modified mapping of ``partner_id`` (one per source by convention)."""

        mappings = self.by_partner.get(partner_id)
        if not mappings:
            return None
        return max(mappings, key=lambda mapping: mapping.last_modified)

    def record(self, mapping: ExternalMapping, *, previous_external_id: str | None = None) -> None:
        """Reflect a successful insert or update of ``mapping``."""

        if previous_external_id is not None:
            old_key = normalize_key(previous_external_id)
            owner = self.by_external.get(old_key)
            if owner is not None and owner.id == mapping.id:
                del self.by_external[old_key]
            self.by_partner_external.pop((mapping.entity_id, old_key), None)

        partner_mappings = self.by_partner.setdefault(mapping.entity_id, [])
        if all(existing.id != mapping.id for existing in partner_mappings):
            partner_mappings.append(mapping)
        else:
            partner_mappings[:] = [
                mapping if existing.id == mapping.id else existing for existing in partner_mappings
            ]

        key = normalize_key(mapping.external_id)
        self.by_external[key] = mapping
        self.by_partner_external[(mapping.entity_id, key)] = mapping


def classify_row(
    row: InputRow,
    *,
    match: Callable[[str], MatchResult],
    index: CandidateIndex,
    snapshot: MappingSnapshot,
) -> Suggestion:
    base = {
        "row_number": row.row_number,
        "brand": row.brand,
        "client_id": row.client_id,
        "client_name": row.client_name,
    }
    if not row.client_id.strip() or not row.brand.strip():
        return Suggestion(**base, status=SuggestionStatus.MISSING_DATA)

    result = match(row.brand)
    if result.ambiguous:
        return Suggestion(**base, status=SuggestionStatus.AMBIGUOUS_PARTNER)
    partner = result.partner
    if partner is None:
        return Suggestion(**base, status=SuggestionStatus.PARTNER_NOT_FOUND)

    bound = snapshot.for_partner_external(partner.id, row.client_id)
    current = bound or snapshot.latest_for_partner(partner.id)
    owner = snapshot.owner_of(row.client_id)

    status = SuggestionStatus.READY
    conflicting_partner_name: str | None = None
    if owner is not None and owner.entity_id != partner.id:
        conflicting = index.partners_by_id.get(owner.entity_id)
        conflicting_partner_name = conflicting.brand_name if conflicting else None
        status = SuggestionStatus.CLIENT_CONFLICT
        log.info(
            "Row %s: client id %r already bound to partner %s",
            row.row_number,
            row.client_id,
            conflicting_partner_name or owner.entity_id,
        )
    elif bound is not None:
        status = SuggestionStatus.ALREADY_MAPPED

    return Suggestion(
        **base,
        status=status,
        matched_partner_id=partner.id,
        matched_partner_name=partner.brand_name,
        match_type=result.match_type,
        current_mapping_id=current.id if current else None,
        current_external_id=current.external_id if current else None,
        current_mapping_metadata=dict(current.meta) if current else None,
        conflicting_partner_name=conflicting_partner_name,
    )


def classify_rows(
    rows: Iterable[InputRow],
    *,
    match: Callable[[str], MatchResult],
    index: CandidateIndex,
    snapshot: MappingSnapshot,
) -> list[Suggestion]:
    """Classify ``rows`` in input order; never raises for row-level problems."""

    return [classify_row(row, match=match, index=index, snapshot=snapshot) for row in rows]
