"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from functools import cache
from logging import getLogger
from typing import TYPE_CHECKING

from partnerlink.adapters.cache import ClientNameCache
from partnerlink.adapters.csv_reader import CsvReferenceReader
from partnerlink.adapters.google_sheets import GoogleSheetsReferenceReader
from partnerlink.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyReconciliationUnitOfWork,
    is_started,
    startup,
)
from partnerlink.config import (
    get_column_hints,
    get_google_sheets_config,
    get_match_thresholds,
    get_reference_sheet_config,
)
from partnerlink.domain.marketplaces import MARKETPLACE_BY_CODE
from partnerlink.domain.model import MappingSource, Partner
from partnerlink.domain.ports.cache import NullCacheInvalidator
from partnerlink.domain.ports.unit_of_work import ReconciliationUnitOfWork
from partnerlink.domain.reconciliation import (
    ReconciliationEngine,
    SyncTriggerResult,
    mapping_marketplace_code,
)

if TYPE_CHECKING:
    from pathlib import Path

    from partnerlink.config import MatchThresholds
    from partnerlink.domain.ports.cache import CacheInvalidator
    from partnerlink.domain.ports.fetching import ReferenceSheetReader
    from partnerlink.domain.reconciliation import ReferenceSheetPreview, ReferenceSheetSyncResult

UnitOfWorkFactory = Callable[[], ReconciliationUnitOfWork]

SYNC_TAB_NOT_ON_REFERENCE_SHEET = "sync-tab-not-on-reference-sheet"

log = getLogger(__name__)


def _default_unit_of_work_factory() -> UnitOfWorkFactory:
    if not is_started():
        startup()
    return SqlAlchemyReconciliationUnitOfWork


def build_reference_reader(
    *,
    csv_path: Path | None = None,
    spreadsheet_id: str | None = None,
) -> ReferenceSheetReader:
    """Reader for a local CSV export when ``csv_path`` is given, otherwise Google Sheets."""

    if csv_path is not None:
        return CsvReferenceReader(csv_path, hints=get_column_hints())
    config = get_reference_sheet_config(spreadsheet_id=spreadsheet_id)
    return GoogleSheetsReferenceReader(config=config, sheets_config=get_google_sheets_config())


def _load_client_names(
    unit_of_work_factory: UnitOfWorkFactory,
) -> Callable[[MappingSource], dict[str, str]]:
    def loader(source: MappingSource) -> dict[str, str]:
        with unit_of_work_factory() as uow:
            names = {
                partner.id: partner.brand_name
                for partner in uow.repositories.partners.list_all()
            }
            return {
                mapping.external_id: names.get(mapping.entity_id, "")
                for mapping in uow.repositories.external_mappings.list_by_source(source)
            }

    return loader


@cache
def get_client_name_cache() -> ClientNameCache:
    """Process-wide client name cache over the configured store."""

    return ClientNameCache(loader=_load_client_names(_default_unit_of_work_factory()))


def _build_engine(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None,
    source: MappingSource,
    thresholds: MatchThresholds | None,
    cache_invalidator: CacheInvalidator | None,
) -> ReconciliationEngine:
    if unit_of_work_factory is None:
        unit_of_work_factory = _default_unit_of_work_factory()
        if cache_invalidator is None:
            cache_invalidator = get_client_name_cache()
    return ReconciliationEngine(
        unit_of_work_factory=unit_of_work_factory,
        source=source,
        thresholds=thresholds or get_match_thresholds(),
        cache=cache_invalidator or NullCacheInvalidator(),
    )


def preview_reference_sheet(
    *,
    reader: ReferenceSheetReader | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    source: MappingSource = MappingSource.WAREHOUSE,
    thresholds: MatchThresholds | None = None,
) -> ReferenceSheetPreview:
    """Classify the reference sheet against the store without writing."""

    engine = _build_engine(
        unit_of_work_factory=unit_of_work_factory,
        source=source,
        thresholds=thresholds,
        cache_invalidator=None,
    )
    sheet = (reader or build_reference_reader()).read()
    return engine.preview(sheet)


def apply_reference_sheet_mappings(
    *,
    dry_run: bool = False,
    reader: ReferenceSheetReader | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    source: MappingSource = MappingSource.WAREHOUSE,
    thresholds: MatchThresholds | None = None,
    cache_invalidator: CacheInvalidator | None = None,
) -> ReferenceSheetSyncResult:
    """Classify the reference sheet and write its ready mappings."""

    engine = _build_engine(
        unit_of_work_factory=unit_of_work_factory,
        source=source,
        thresholds=thresholds,
        cache_invalidator=cache_invalidator,
    )
    sheet = (reader or build_reference_reader()).read()
    log.info(
        "Applying reference sheet %r/%r to %s mappings (dry_run=%s)",
        sheet.title,
        sheet.tab.title,
        source,
        dry_run,
    )
    result = engine.apply(sheet, dry_run=dry_run)
    log.info(
        "Finished reference sheet apply: applied=%s, inserted=%s, updated=%s, "
        "skipped=%s, conflicts=%s",
        result.applied,
        result.inserted,
        result.updated,
        result.skipped,
        result.conflicts,
    )
    return result


def maybe_sync_on_tab_sync(
    synced_spreadsheet_id: str | None,
    *,
    reference_spreadsheet_id: str | None = None,
    dry_run: bool = False,
    reader: ReferenceSheetReader | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    source: MappingSource = MappingSource.WAREHOUSE,
    thresholds: MatchThresholds | None = None,
    cache_invalidator: CacheInvalidator | None = None,
) -> SyncTriggerResult:
    """Run the apply after a tab sync, but only when that tab lives on the reference sheet."""

    expected = reference_spreadsheet_id or get_reference_sheet_config().spreadsheet_id
    if not synced_spreadsheet_id or synced_spreadsheet_id != expected:
        log.debug(
            "Synced spreadsheet %r is not the reference sheet %r",
            synced_spreadsheet_id,
            expected,
        )
        return SyncTriggerResult(triggered=False, reason=SYNC_TAB_NOT_ON_REFERENCE_SHEET)

    result = apply_reference_sheet_mappings(
        dry_run=dry_run,
        reader=reader or build_reference_reader(spreadsheet_id=expected),
        unit_of_work_factory=unit_of_work_factory,
        source=source,
        thresholds=thresholds,
        cache_invalidator=cache_invalidator,
    )
    return SyncTriggerResult(triggered=True, result=result)


def add_partner(
    brand_name: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Partner:
    """Register a partner under ``brand_name``."""

    name = brand_name.strip()
    if not name:
        raise ValueError("Partner brand name must not be blank")
    factory = unit_of_work_factory or _default_unit_of_work_factory()
    partner = Partner(brand_name=name)
    with factory() as uow:
        uow.repositories.partners.add(partner)
        uow.commit()
    log.info("Created partner %s (%s)", partner.id, partner.brand_name)
    return partner


def list_partners(*, unit_of_work_factory: UnitOfWorkFactory | None = None) -> list[Partner]:
    factory = unit_of_work_factory or _default_unit_of_work_factory()
    with factory() as uow:
        return list(uow.repositories.partners.list_all())


def list_client_names(
    source: MappingSource = MappingSource.WAREHOUSE,
    *,
    client_names: ClientNameCache | None = None,
) -> dict[str, str]:
    """Client id -> partner name for ``source``, served from the client name cache."""

    return dict((client_names or get_client_name_cache()).get(source))


def list_mapping_marketplaces(
    source: MappingSource = MappingSource.WAREHOUSE,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[dict[str, str | None]]:
    """Every mapping of ``source`` with its partner and resolved marketplace."""

    factory = unit_of_work_factory or _default_unit_of_work_factory()
    with factory() as uow:
        names = {partner.id: partner.brand_name for partner in uow.repositories.partners.list_all()}
        mappings = uow.repositories.external_mappings.list_by_source(source)
        rows: list[dict[str, str | None]] = []
        for mapping in mappings:
            code = mapping_marketplace_code(mapping)
            marketplace = MARKETPLACE_BY_CODE.get(code) if code else None
            rows.append(
                {
                    "client_id": mapping.external_id,
                    "partner": names.get(mapping.entity_id, ""),
                    "marketplace_code": code,
                    "marketplace_name": marketplace.name if marketplace else None,
                }
            )
    return rows
