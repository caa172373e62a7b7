from __future__ import annotations

import pytest

from partnerlink.domain.model import MappingSource, Partner
from partnerlink.domain.reconciliation import (
    ApplyOutcome,
    MappingSnapshot,
    MappingSynchronizer,
    Suggestion,
    SuggestionStatus,
    mapping_marketplace_code,
    merge_reference_metadata,
)

from tests.helpers.reconciliation import (
    FIXED_TIME,
    InMemoryExternalMappingRepository,
    RecordingCacheInvalidator,
    make_mapping,
    make_sheet,
)


def _ready(
    partner: Partner,
    client_id: str,
    *,
    row_number: int = 2,
    client_name: str | None = None,
) -> Suggestion:
    return Suggestion(
        row_number=row_number,
        brand=partner.brand_name,
        client_id=client_id,
        client_name=client_name,
        status=SuggestionStatus.READY,
        matched_partner_id=partner.id,
        matched_partner_name=partner.brand_name,
    )


def _synchronizer(
    repository: InMemoryExternalMappingRepository,
    cache: RecordingCacheInvalidator | None = None,
) -> MappingSynchronizer:
    return MappingSynchronizer(
        mappings=repository,
        snapshot=MappingSnapshot.build(repository.list_by_source(MappingSource.WAREHOUSE)),
        cache=cache or RecordingCacheInvalidator(),
        clock=lambda: FIXED_TIME,
    )


def test_merge_reference_metadata_overwrites_only_reference_block() -> None:
    acme = Partner(brand_name="Acme")
    sheet = make_sheet([])
    existing = {"owner": "ops", "reference_sheet": {"row_number": 99, "stale": True}}

    merged = merge_reference_metadata(
        existing,
        sheet,
        _ready(acme, "acme-de", row_number=7, client_name="Acme Germany"),
        synced_at=FIXED_TIME,
    )

    assert merged["owner"] == "ops"
    assert merged["reference_sheet"] == {
        "spreadsheet_id": "sheet-123",
        "tab_name": "Brands",
        "tab_gid": 42,
        "row_number": 7,
        "brand": "Acme",
        "client_id": "acme-de",
        "client_name": "Acme Germany",
        "marketplace_code": "DE",
        "synced_at": FIXED_TIME.isoformat(),
    }
    assert merged["marketplace_code"] == "DE"
    assert merged["marketplace_source"] == "reference_sheet_inference"
    assert existing["reference_sheet"] == {"row_number": 99, "stale": True}


def test_merge_reference_metadata_without_marketplace() -> None:
    acme = Partner(brand_name="Acme")

    merged = merge_reference_metadata(
        None, make_sheet([]), _ready(acme, "C-1"), synced_at=FIXED_TIME
    )

    assert merged["reference_sheet"]["marketplace_code"] is None
    assert "marketplace_code" not in merged


def test_sync_inserts_new_mapping_and_invalidates_cache_once() -> None:
    acme = Partner(brand_name="Acme")
    globex = Partner(brand_name="Globex")
    repository = InMemoryExternalMappingRepository()
    cache = RecordingCacheInvalidator()

    report = _synchronizer(repository, cache).sync(
        [_ready(acme, "C-1"), _ready(globex, "C-2", row_number=3)],
        sheet=make_sheet([]),
    )

    assert report.counts.inserted == 2
    assert report.counts.applied == 2
    assert report.outcomes == {2: ApplyOutcome.INSERTED, 3: ApplyOutcome.INSERTED}
    assert {mapping.external_id for mapping in repository.mappings} == {"C-1", "C-2"}
    assert cache.calls == [MappingSource.WAREHOUSE]


def test_sync_updates_existing_partner_mapping() -> None:
    acme = Partner(brand_name="Acme")
    existing = make_mapping(acme, "OLD-1", meta={"owner": "ops"})
    repository = InMemoryExternalMappingRepository([existing])

    report = _synchronizer(repository).sync([_ready(acme, "NEW-1")], sheet=make_sheet([]))

    assert report.counts.updated == 1
    assert repository.mappings == [existing]
    assert existing.external_id == "NEW-1"
    assert existing.meta["owner"] == "ops"
    assert existing.meta["reference_sheet"]["client_id"] == "NEW-1"
    assert existing.updated_at == FIXED_TIME


def test_sync_skips_duplicate_pairs_in_batch() -> None:
    acme = Partner(brand_name="Acme")
    repository = InMemoryExternalMappingRepository()

    report = _synchronizer(repository).sync(
        [_ready(acme, "C-1"), _ready(acme, " c-1 ", row_number=3)],
        sheet=make_sheet([]),
    )

    assert report.outcomes == {2: ApplyOutcome.INSERTED, 3: ApplyOutcome.SKIPPED}
    assert report.counts.skipped == 1
    assert len(repository.mappings) == 1


def test_sync_counts_store_conflicts_and_continues() -> None:
    acme = Partner(brand_name="Acme")
    globex = Partner(brand_name="Globex")
    initech = Partner(brand_name="Initech")
    repository = InMemoryExternalMappingRepository([make_mapping(globex, "C-1")])
    cache = RecordingCacheInvalidator()

    report = _synchronizer(repository, cache).sync(
        [_ready(acme, "C-1"), _ready(initech, "C-3", row_number=3)],
        sheet=make_sheet([]),
    )

    assert report.outcomes == {2: ApplyOutcome.CONFLICT, 3: ApplyOutcome.INSERTED}
    assert report.counts.conflicts == 1
    assert report.counts.inserted == 1
    assert cache.calls == [MappingSource.WAREHOUSE]


def test_sync_without_writes_leaves_cache_alone() -> None:
    acme = Partner(brand_name="Acme")
    globex = Partner(brand_name="Globex")
    repository = InMemoryExternalMappingRepository([make_mapping(globex, "C-1")])
    cache = RecordingCacheInvalidator()

    report = _synchronizer(repository, cache).sync([_ready(acme, "C-1")], sheet=make_sheet([]))

    assert report.counts.applied == 0
    assert cache.calls == []


def test_sync_ignores_non_ready_suggestions() -> None:
    acme = Partner(brand_name="Acme")
    repository = InMemoryExternalMappingRepository()
    not_found = Suggestion(
        row_number=2,
        brand="Initech",
        client_id="C-9",
        client_name=None,
        status=SuggestionStatus.PARTNER_NOT_FOUND,
    )
    mapped = Suggestion(
        row_number=3,
        brand="Acme",
        client_id="C-1",
        client_name=None,
        status=SuggestionStatus.ALREADY_MAPPED,
        matched_partner_id=acme.id,
    )

    report = _synchronizer(repository).sync([not_found, mapped], sheet=make_sheet([]))

    assert report.outcomes == {}
    assert repository.upserts == []


def test_dry_run_plans_without_writing() -> None:
    acme = Partner(brand_name="Acme")
    globex = Partner(brand_name="Globex")
    existing = make_mapping(acme, "OLD-1")
    repository = InMemoryExternalMappingRepository([existing])
    cache = RecordingCacheInvalidator()

    report = _synchronizer(repository, cache).sync(
        [
            _ready(acme, "NEW-1"),
            _ready(globex, "C-2", row_number=3),
            _ready(globex, "C-2", row_number=4),
        ],
        sheet=make_sheet([]),
        dry_run=True,
    )

    assert report.dry_run
    assert report.outcomes == {
        2: ApplyOutcome.UPDATED,
        3: ApplyOutcome.INSERTED,
        4: ApplyOutcome.SKIPPED,
    }
    assert report.counts.conflicts == 0
    assert repository.upserts == []
    assert existing.external_id == "OLD-1"
    assert cache.calls == []


def test_second_row_for_same_partner_updates_first_write() -> None:
    acme = Partner(brand_name="Acme")
    repository = InMemoryExternalMappingRepository()

    report = _synchronizer(repository).sync(
        [_ready(acme, "C-1"), _ready(acme, "C-2", row_number=3)],
        sheet=make_sheet([]),
    )

    assert report.outcomes == {2: ApplyOutcome.INSERTED, 3: ApplyOutcome.UPDATED}
    assert [mapping.external_id for mapping in repository.mappings] == ["C-2"]


@pytest.mark.parametrize("dry_run", [False, True])
def test_dry_run_and_apply_agree_on_client_id_collisions(dry_run: bool) -> None:
    acme = Partner(brand_name="Acme")
    globex = Partner(brand_name="Globex")
    initech = Partner(brand_name="Initech")
    umbrella = Partner(brand_name="Umbrella")
    repository = InMemoryExternalMappingRepository([make_mapping(globex, "TAKEN")])

    report = _synchronizer(repository).sync(
        [
            _ready(acme, "TAKEN"),
            _ready(initech, "C-1", row_number=3),
            _ready(umbrella, "C-1", row_number=4),
            _ready(umbrella, "taken", row_number=5),
        ],
        sheet=make_sheet([]),
        dry_run=dry_run,
    )

    assert report.outcomes == {
        2: ApplyOutcome.CONFLICT,
        3: ApplyOutcome.INSERTED,
        4: ApplyOutcome.CONFLICT,
        5: ApplyOutcome.INSERTED,
    }
    assert (report.counts.inserted, report.counts.conflicts) == (2, 2)
    assert len(repository.upserts) == (0 if dry_run else 4)


@pytest.mark.parametrize(
    ("external_id", "meta", "expected"),
    [
        ("acme-us", {"marketplace_code": "eu de"}, "DE"),
        (
            "acme-us",
            {"marketplace_code": "Narnia", "reference_sheet": {"marketplace_code": "UK"}},
            "UK",
        ),
        ("acme-us", {"reference_sheet": {"marketplace_code": None}}, "US"),
        ("C-1", {}, None),
    ],
)
def test_mapping_marketplace_code_precedence(
    external_id: str, meta: dict[str, object], expected: str | None
) -> None:
    mapping = make_mapping(Partner(brand_name="Acme"), external_id, meta=meta)

    assert mapping_marketplace_code(mapping) == expected
