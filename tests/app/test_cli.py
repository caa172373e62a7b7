from __future__ import annotations

import json
from pathlib import Path

import pytest

from partnerlink.config import MissingConfigurationError
from partnerlink.domain.model import MappingSource, Partner
from partnerlink.domain.reconciliation import SyncTriggerResult
from partnerlink.ui import cli
from tests.helpers.reconciliation import StaticReader, make_sheet


def test_preview_reads_csv_and_prints_json(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    captured: dict[str, object] = {}
    sheet = make_sheet([("Acme", "A-1")])

    def fake_build_reader(**kwargs: object) -> StaticReader:
        captured["reader"] = kwargs
        return StaticReader(sheet)

    class FakePreview:
        def to_dict(self) -> dict[str, object]:
            return {"summary": {"ready": 1}}

    def fake_preview(**kwargs: object) -> FakePreview:
        captured["preview"] = kwargs
        return FakePreview()

    monkeypatch.setattr(cli, "build_reference_reader", fake_build_reader)
    monkeypatch.setattr(cli, "preview_reference_sheet", fake_preview)

    cli.main(["preview", "--csv", "brands.csv"])

    assert captured["reader"] == {"csv_path": Path("brands.csv"), "spreadsheet_id": None}
    assert captured["preview"]["source"] is MappingSource.WAREHOUSE  # type: ignore[index]
    assert json.loads(capsys.readouterr().out) == {"summary": {"ready": 1}}


def test_apply_passes_dry_run_and_source(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    class FakeResult:
        def to_dict(self) -> dict[str, object]:
            return {}

    def fake_apply(**kwargs: object) -> FakeResult:
        captured.update(kwargs)
        return FakeResult()

    monkeypatch.setattr(cli, "build_reference_reader", lambda **_: None)
    monkeypatch.setattr(cli, "apply_reference_sheet_mappings", fake_apply)

    cli.main(
        [
            "apply",
            "--spreadsheet-id",
            "sheet-123",
            "--dry-run",
            "--source",
            "reference_sheet",
        ]
    )

    assert captured["dry_run"] is True
    assert captured["source"] is MappingSource.REFERENCE_SHEET


def test_tab_synced_prints_trigger_result(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    def fake_trigger(synced: str, **kwargs: object) -> SyncTriggerResult:
        assert synced == "other-sheet"
        assert kwargs["dry_run"] is False
        return SyncTriggerResult(triggered=False, reason="sync-tab-not-on-reference-sheet")

    monkeypatch.setattr(cli, "maybe_sync_on_tab_sync", fake_trigger)

    cli.main(["tab-synced", "other-sheet"])

    assert json.loads(capsys.readouterr().out)["triggered"] is False


def test_partners_add_and_list(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    partner = Partner(brand_name="Acme")
    monkeypatch.setattr(cli, "add_partner", lambda name: partner)
    monkeypatch.setattr(cli, "list_partners", lambda: [partner])

    cli.main(["partners", "add", "Acme"])
    added = json.loads(capsys.readouterr().out)
    cli.main(["partners", "list"])
    listed = json.loads(capsys.readouterr().out)

    assert added == {"id": str(partner.id), "brand_name": "Acme"}
    assert listed == [added]


def test_mappings_list(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.setattr(cli, "list_client_names", lambda source: {"c-1": f"Acme ({source})"})

    cli.main(["mappings", "list"])

    assert json.loads(capsys.readouterr().out) == {"c-1": "Acme (warehouse)"}


def test_mappings_marketplaces(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    seen: list[MappingSource] = []

    def fake_marketplaces(source: MappingSource) -> list[dict[str, str | None]]:
        seen.append(source)
        return [{"client_id": "c-1", "marketplace_code": "DE"}]

    monkeypatch.setattr(cli, "list_mapping_marketplaces", fake_marketplaces)

    cli.main(["mappings", "marketplaces", "--source", "reference_sheet"])

    assert json.loads(capsys.readouterr().out) == [{"client_id": "c-1", "marketplace_code": "DE"}]
    assert seen == [MappingSource.REFERENCE_SHEET]


def test_configuration_errors_exit_with_code_2(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_build_reader(**_: object) -> None:
        raise MissingConfigurationError(["PARTNERLINK_REFERENCE_SHEET_ID"])

    monkeypatch.setattr(cli, "build_reference_reader", fake_build_reader)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["preview"])

    assert excinfo.value.code == 2


def test_unexpected_errors_exit_with_code_1(monkeypatch: pytest.MonkeyPatch) -> None:
    def broken_list() -> list[Partner]:
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(cli, "list_partners", broken_list)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["partners", "list"])

    assert excinfo.value.code == 1


def test_unknown_command_is_rejected_by_argparse() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["explode"])

    assert excinfo.value.code == 2
