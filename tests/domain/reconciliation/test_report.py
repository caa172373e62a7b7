from __future__ import annotations

import json

from partnerlink.domain.model import Partner
from partnerlink.domain.reconciliation import ReconciliationEngine, SyncTriggerResult

from tests.helpers.reconciliation import make_sheet, make_unit_of_work


def test_sync_result_serializes_to_json() -> None:
    acme = Partner(brand_name="Acme Corp")
    uow = make_unit_of_work([acme])
    engine = ReconciliationEngine(unit_of_work_factory=lambda: uow)

    result = engine.apply(make_sheet([("Acme Corp", "A-1", "Acme US"), ("Nobody", "N-1")]))
    payload = result.to_dict()

    assert payload["sheet"] == {
        "spreadsheet_id": "sheet-123",
        "title": "Partner Reference",
        "tab_name": "Brands",
        "tab_id": 42,
        "header_row": 0,
        "columns": {"client_id": "Client ID", "brand": "Brand", "client_name": "Client Name"},
        "parsed_rows": 2,
        "max_rows_fetched": 5000,
    }
    assert payload["summary"]["ready"] == 1
    assert payload["summary"]["partner_not_found"] == 1
    assert payload["suggestions"][0]["matched_partner_id"] == str(acme.id)
    assert payload["suggestions"][0]["status"] == "ready"
    assert payload["applied"] == 1
    assert payload["dry_run"] is False
    json.dumps(payload)


def test_trigger_result_without_run() -> None:
    skipped = SyncTriggerResult(triggered=False, reason="sync-tab-not-on-reference-sheet")

    assert skipped.to_dict() == {
        "triggered": False,
        "reason": "sync-tab-not-on-reference-sheet",
        "result": None,
    }
