"""Orchestrator for one reconciliation run.

A run reads the full partner registry and the mappings of one source, builds
the candidate index, classifies every reference row and, for apply runs,
hands the ``ready`` rows to the synchronizer. Reads happen before any write,
so a failed read aborts the run with nothing applied.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from partnerlink.config.matching import MatchThresholds
from partnerlink.domain.model import MappingSource
from partnerlink.domain.ports.cache import NullCacheInvalidator

from .classify import MappingSnapshot, classify_rows
from .contracts import SuggestionStatus, summarize
from .index import CandidateIndex
from .match import PartnerMatcher
from .report import ReferenceSheetPreview, ReferenceSheetSyncResult, SheetMeta
from .sync import MappingSynchronizer

if TYPE_CHECKING:
    from collections.abc import Callable

    from partnerlink.domain.model import ReferenceSheet
    from partnerlink.domain.ports.cache import CacheInvalidator
    from partnerlink.domain.ports.unit_of_work import ReconciliationUnitOfWork

    from .contracts import Suggestion


log = logging.getLogger(__name__)


@dataclass(slots=True)
class RunState:
    """Everything a run derives from the store snapshot."""

    index: CandidateIndex
    snapshot: MappingSnapshot
    suggestions: list[Suggestion]


@dataclass(slots=True)
class ReconciliationEngine:
    unit_of_work_factory: Callable[[], ReconciliationUnitOfWork]
    source: MappingSource = MappingSource.WAREHOUSE
    thresholds: MatchThresholds = field(default_factory=MatchThresholds)
    cache: CacheInvalidator = field(default_factory=NullCacheInvalidator)

    def preview(self, sheet: ReferenceSheet) -> ReferenceSheetPreview:
        """Classify every row of ``sheet`` without writing anything."""

        with self.unit_of_work_factory() as uow:
            state = self._classify(uow, sheet)
        return ReferenceSheetPreview(
            sheet=SheetMeta.from_sheet(sheet),
            summary=summarize(state.suggestions),
            suggestions=tuple(state.suggestions),
        )

    def apply(self, sheet: ReferenceSheet, *, dry_run: bool = False) -> ReferenceSheetSyncResult:
        """Classify ``sheet`` and write its ready suggestions.

        Each successful write is committed on its own, so rows applied before
        a later failure stay applied.
        """

        with self.unit_of_work_factory() as uow:
            state = self._classify(uow, sheet)
            synchronizer = MappingSynchronizer(
                mappings=uow.repositories.external_mappings,
                snapshot=state.snapshot,
                source=self.source,
                cache=self.cache,
                commit=uow.commit,
            )
            report = synchronizer.sync(state.suggestions, sheet=sheet, dry_run=dry_run)

        counts = report.counts
        return ReferenceSheetSyncResult(
            sheet=SheetMeta.from_sheet(sheet),
            summary=summarize(state.suggestions),
            suggestions=tuple(state.suggestions),
            applied=counts.applied,
            inserted=counts.inserted,
            updated=counts.updated,
            skipped=counts.skipped,
            conflicts=counts.conflicts,
            dry_run=dry_run,
        )

    def _classify(self, uow: ReconciliationUnitOfWork, sheet: ReferenceSheet) -> RunState:
        partners = uow.repositories.partners.list_all()
        mappings = uow.repositories.external_mappings.list_by_source(self.source)
        index = CandidateIndex.build(partners)
        snapshot = MappingSnapshot.build(mappings)
        matcher = PartnerMatcher(index=index, thresholds=self.thresholds)

        log.info(
            "Reconciling %d rows from %r/%r against %d partners and %d %s mappings",
            len(sheet.rows),
            sheet.title,
            sheet.tab.title,
            len(index),
            len(mappings),
            self.source,
        )
        suggestions = classify_rows(sheet.rows, match=matcher, index=index, snapshot=snapshot)
        summary = summarize(suggestions)
        log.info(
            "Classified rows: %s",
            ", ".join(f"{status}={count}" for status, count in summary.items()),
        )
        if summary[SuggestionStatus.CLIENT_CONFLICT]:
            log.warning(
                "%d rows reference client ids bound to a different partner",
                summary[SuggestionStatus.CLIENT_CONFLICT],
            )
        return RunState(index=index, snapshot=snapshot, suggestions=suggestions)
