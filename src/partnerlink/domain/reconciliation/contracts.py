"""Value types exchanged between matcher, classifier and synchronizer."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from uuid import UUID

    from partnerlink.domain.model import Partner


class MatchType(StrEnum):
    """How a brand name was tied to a partner."""

    EXACT = "exact"
    NORMALIZED = "normalized"


class MatchTier(StrEnum):
    """Matcher tier that produced a decision (for logging and audit)."""

    EXACT = "exact"
    COMPACT = "compact"
    CANONICAL = "canonical"
    CONTAINMENT = "containment"
    TYPO = "typo"


class SuggestionStatus(StrEnum):
    READY = "ready"
    ALREADY_MAPPED = "already_mapped"
    PARTNER_NOT_FOUND = "partner_not_found"
    AMBIGUOUS_PARTNER = "ambiguous_partner"
    CLIENT_CONFLICT = "client_conflict"
    MISSING_DATA = "missing_data"


class ApplyOutcome(StrEnum):
    INSERTED = "inserted"
    UPDATED = "updated"
    SKIPPED = "skipped"
    CONFLICT = "conflict"


@dataclass(frozen=True, slots=True)
class MatchResult:
    partner: Partner | None = None
    match_type: MatchType | None = None
    ambiguous: bool = False
    tier: MatchTier | None = None
    candidates: tuple[Partner, ...] = ()

    @classmethod
    def no_match(cls) -> MatchResult:
        return cls()

    @classmethod
    def unique(cls, partner: Partner, match_type: MatchType, tier: MatchTier) -> MatchResult:
        return cls(partner=partner, match_type=match_type, tier=tier, candidates=(partner,))

    @classmethod
    def tie(cls, candidates: tuple[Partner, ...], tier: MatchTier) -> MatchResult:
        return cls(ambiguous=True, tier=tier, candidates=candidates)

    @property
    def matched(self) -> bool:
        return self.partner is not None


@dataclass(frozen=True, slots=True, kw_only=True)
class Suggestion:
    """Classified outcome for one reference row."""

    row_number: int
    brand: str
    client_id: str
    client_name: str | None
    status: SuggestionStatus
    matched_partner_id: UUID | None = None
    matched_partner_name: str | None = None
    match_type: MatchType | None = None
    current_mapping_id: UUID | None = None
    current_external_id: str | None = None
    current_mapping_metadata: dict[str, Any] | None = None
    conflicting_partner_name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        for key in ("matched_partner_id", "current_mapping_id"):
            if payload[key] is not None:
                payload[key] = str(payload[key])
        return payload


type StatusSummary = dict[SuggestionStatus, int]


def summarize(suggestions: list[Suggestion] | tuple[Suggestion, ...]) -> StatusSummary:
    """Count suggestions per status, listing every status even when zero."""

    summary: StatusSummary = dict.fromkeys(SuggestionStatus, 0)
    for suggestion in suggestions:
        summary[suggestion.status] += 1
    return summary


@dataclass(slots=True)
class SyncCounts:
    inserted: int = 0
    updated: int = 0
    skipped: int = 0
    conflicts: int = 0

    @property
    def applied(self) -> int:
        return self.inserted + self.updated

    def record(self, outcome: ApplyOutcome) -> None:
        match outcome:
            case ApplyOutcome.INSERTED:
                self.inserted += 1
            case ApplyOutcome.UPDATED:
                self.updated += 1
            case ApplyOutcome.SKIPPED:
                self.skipped += 1
            case ApplyOutcome.CONFLICT:
                self.conflicts += 1
