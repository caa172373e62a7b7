from __future__ import annotations

from partnerlink.domain.model import MappingSource, Partner
from partnerlink.domain.reconciliation import ReconciliationEngine, SuggestionStatus

from tests.helpers.reconciliation import (
    RecordingCacheInvalidator,
    make_mapping,
    make_sheet,
    make_unit_of_work,
)


def _engine(uow, cache: RecordingCacheInvalidator | None = None) -> ReconciliationEngine:
    return ReconciliationEngine(
        unit_of_work_factory=lambda: uow,
        cache=cache or RecordingCacheInvalidator(),
    )


def test_preview_classifies_every_row_without_writing() -> None:
    acme = Partner(brand_name="Acme Corp")
    globex = Partner(brand_name="Globex")
    initech_a = Partner(brand_name="Initech Corp")
    initech_b = Partner(brand_name="Initech Inc")
    uow = make_unit_of_work(
        [acme, globex, initech_a, initech_b],
        [make_mapping(globex, "G-1")],
    )
    sheet = make_sheet(
        [
            ("Acme Corp", "A-1", "Acme US"),
            ("Globex", "G-1"),
            ("Initech", "I-1"),
            ("Umbrella", "U-1"),
            ("Acme Corp", ""),
            ("Acme Corp", "G-1"),
        ]
    )

    preview = _engine(uow).preview(sheet)

    assert [suggestion.status for suggestion in preview.suggestions] == [
        SuggestionStatus.READY,
        SuggestionStatus.ALREADY_MAPPED,
        SuggestionStatus.AMBIGUOUS_PARTNER,
        SuggestionStatus.PARTNER_NOT_FOUND,
        SuggestionStatus.MISSING_DATA,
        SuggestionStatus.CLIENT_CONFLICT,
    ]
    assert preview.summary == dict.fromkeys(SuggestionStatus, 1)
    assert preview.sheet.parsed_rows == 6
    assert uow.external_mappings.upserts == []
    assert uow.commits == 0


def test_apply_twice_is_idempotent() -> None:
    acme = Partner(brand_name="Acme Corp")
    globex = Partner(brand_name="Globex")
    uow = make_unit_of_work([acme, globex])
    cache = RecordingCacheInvalidator()
    engine = _engine(uow, cache)
    sheet = make_sheet([("Acme Corp", "A-1"), ("globex", "G-1")])

    first = engine.apply(sheet)
    second = engine.apply(sheet)

    assert (first.applied, first.inserted, first.updated) == (2, 2, 0)
    assert second.applied == 0
    assert second.summary[SuggestionStatus.ALREADY_MAPPED] == 2
    assert len(uow.external_mappings.mappings) == 2
    assert uow.commits == 2
    assert cache.calls == [MappingSource.WAREHOUSE]


def test_apply_updates_existing_mapping_for_partner() -> None:
    acme = Partner(brand_name="Acme Corp")
    existing = make_mapping(acme, "OLD", meta={"owner": "ops"})
    uow = make_unit_of_work([acme], [existing])

    result = _engine(uow).apply(make_sheet([("ACME corp", "NEW", "Acme UK")]))

    assert (result.inserted, result.updated) == (0, 1)
    assert uow.external_mappings.mappings == [existing]
    assert existing.external_id == "NEW"
    assert existing.meta["owner"] == "ops"
    assert existing.meta["marketplace_code"] == "UK"
    suggestion = result.suggestions[0]
    assert suggestion.current_external_id == "OLD"


def test_dry_run_reports_counts_but_never_writes() -> None:
    acme = Partner(brand_name="Acme Corp")
    globex = Partner(brand_name="Globex")
    uow = make_unit_of_work([acme, globex], [make_mapping(acme, "OLD")])
    cache = RecordingCacheInvalidator()
    sheet = make_sheet([("Acme Corp", "A-1"), ("Globex", "G-1"), ("Globex", "G-1")])

    result = _engine(uow, cache).apply(sheet, dry_run=True)

    assert result.dry_run
    assert (result.applied, result.inserted, result.updated, result.skipped) == (2, 1, 1, 1)
    assert result.conflicts == 0
    assert [mapping.external_id for mapping in uow.external_mappings.mappings] == ["OLD"]
    assert uow.external_mappings.upserts == []
    assert uow.commits == 0
    assert cache.calls == []


def test_conflicting_rows_are_never_written() -> None:
    acme = Partner(brand_name="Acme Corp")
    globex = Partner(brand_name="Globex")
    uow = make_unit_of_work([acme, globex], [make_mapping(globex, "SHARED")])

    result = _engine(uow).apply(make_sheet([("Acme Corp", "shared")]))

    assert result.suggestions[0].status is SuggestionStatus.CLIENT_CONFLICT
    assert result.suggestions[0].conflicting_partner_name == "Globex"
    assert result.applied == 0
    assert uow.external_mappings.upserts == []


def test_same_client_for_two_partners_in_one_batch_conflicts_at_write() -> None:
    acme = Partner(brand_name="Acme Corp")
    globex = Partner(brand_name="Globex")
    uow = make_unit_of_work([acme, globex])

    result = _engine(uow).apply(make_sheet([("Acme Corp", "C-1"), ("Globex", "C-1")]))

    assert [suggestion.status for suggestion in result.suggestions] == [
        SuggestionStatus.READY,
        SuggestionStatus.READY,
    ]
    assert (result.inserted, result.conflicts) == (1, 1)
    owners = {mapping.external_id: mapping.entity_id for mapping in uow.external_mappings.mappings}
    assert owners == {"C-1": acme.id}


def test_apply_only_touches_configured_source() -> None:
    acme = Partner(brand_name="Acme Corp")
    other_source = make_mapping(acme, "A-1", source=MappingSource.REFERENCE_SHEET)
    uow = make_unit_of_work([acme], [other_source])

    result = _engine(uow).apply(make_sheet([("Acme Corp", "A-1")]))

    assert result.inserted == 1
    assert other_source.external_id == "A-1"
    assert {mapping.source for mapping in uow.external_mappings.mappings} == {
        MappingSource.WAREHOUSE,
        MappingSource.REFERENCE_SHEET,
    }


def test_dry_run_counts_match_the_real_apply() -> None:
    sheet = make_sheet([("Acme Corp", "C-1"), ("Globex", "C-1"), ("Globex", "G-1")])

    def counts(*, dry_run: bool) -> tuple[int, int, int, int, int]:
        uow = make_unit_of_work([Partner(brand_name="Acme Corp"), Partner(brand_name="Globex")])
        result = _engine(uow).apply(sheet, dry_run=dry_run)
        return (result.applied, result.inserted, result.updated, result.skipped, result.conflicts)

    assert counts(dry_run=True) == counts(dry_run=False) == (2, 2, 0, 0, 1)
