"""Preview and apply-result objects handed to the API/UI layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from partnerlink.domain.model import ReferenceSheet

    from .contracts import StatusSummary, Suggestion


@dataclass(frozen=True, slots=True)
class SheetMeta:
    spreadsheet_id: str
    title: str
    tab_name: str
    tab_id: int
    header_row: int
    columns: dict[str, str | None]
    parsed_rows: int
    max_rows_fetched: int

    @classmethod
    def from_sheet(cls, sheet: ReferenceSheet) -> SheetMeta:
        return cls(
            spreadsheet_id=sheet.spreadsheet_id,
            title=sheet.title,
            tab_name=sheet.tab.title,
            tab_id=sheet.tab.sheet_id,
            header_row=sheet.header_row,
            columns={
                "client_id": sheet.columns.client_id,
                "brand": sheet.columns.brand,
                "client_name": sheet.columns.client_name,
            },
            parsed_rows=len(sheet.rows),
            max_rows_fetched=sheet.max_rows,
        )


@dataclass(frozen=True, slots=True)
class ReferenceSheetPreview:
    sheet: SheetMeta
    summary: StatusSummary
    suggestions: tuple[Suggestion, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "sheet": {
                "spreadsheet_id": self.sheet.spreadsheet_id,
                "title": self.sheet.title,
                "tab_name": self.sheet.tab_name,
                "tab_id": self.sheet.tab_id,
                "header_row": self.sheet.header_row,
                "columns": dict(self.sheet.columns),
                "parsed_rows": self.sheet.parsed_rows,
                "max_rows_fetched": self.sheet.max_rows_fetched,
            },
            "summary": {str(status): count for status, count in self.summary.items()},
            "suggestions": [suggestion.to_dict() for suggestion in self.suggestions],
        }


@dataclass(frozen=True, slots=True, kw_only=True)
class ReferenceSheetSyncResult(ReferenceSheetPreview):
    applied: int = 0
    inserted: int = 0
    updated: int = 0
    skipped: int = 0
    conflicts: int = 0
    dry_run: bool = False

    def to_dict(self) -> dict[str, Any]:
        payload = ReferenceSheetPreview.to_dict(self)
        payload.update(
            applied=self.applied,
            inserted=self.inserted,
            updated=self.updated,
            skipped=self.skipped,
            conflicts=self.conflicts,
            dry_run=self.dry_run,
        )
        return payload


@dataclass(frozen=True, slots=True)
class SyncTriggerResult:
    triggered: bool
    reason: str | None = None
    result: ReferenceSheetSyncResult | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "triggered": self.triggered,
            "reason": self.reason,
            "result": self.result.to_dict() if self.result is not None else None,
        }
