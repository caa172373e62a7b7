"""Partner identity reconciliation.

Layered flow for one run:
1) normalize brand names into exact / compact / canonical forms
2) index the partner registry by each form
3) match every reference row through the tiered matcher
4) classify rows against the current mapping state
5) apply ready rows to the mapping store (or simulate them in a dry run)
"""

from __future__ import annotations

from .classify import MappingSnapshot, classify_row, classify_rows
from .contracts import (
    ApplyOutcome,
    MatchResult,
    MatchTier,
    MatchType,
    Suggestion,
    SuggestionStatus,
    SyncCounts,
    summarize,
)
from .engine import ReconciliationEngine
from .index import CandidateIndex
from .match import PartnerMatcher, match_partner
from .normalize import canonical_compact_name, compact_name, normalize_key, normalize_name
from .report import ReferenceSheetPreview, ReferenceSheetSyncResult, SheetMeta, SyncTriggerResult
from .sync import (
    MappingSynchronizer,
    SyncReport,
    mapping_marketplace_code,
    merge_reference_metadata,
)

__all__ = [
    "ApplyOutcome",
    "CandidateIndex",
    "MappingSnapshot",
    "MappingSynchronizer",
    "MatchResult",
    "MatchTier",
    "MatchType",
    "PartnerMatcher",
    "ReconciliationEngine",
    "ReferenceSheetPreview",
    "ReferenceSheetSyncResult",
    "SheetMeta",
    "Suggestion",
    "SuggestionStatus",
    "SyncCounts",
    "SyncReport",
    "SyncTriggerResult",
    "canonical_compact_name",
    "classify_row",
    "classify_rows",
    "compact_name",
    "mapping_marketplace_code",
    "match_partner",
    "merge_reference_metadata",
    "normalize_key",
    "normalize_name",
    "summarize",
]
