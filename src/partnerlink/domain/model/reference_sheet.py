"""Rows read from the external reference source.

These values exist for one reconciliation run only.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class InputRow:
    row_number: int
    brand: str
    client_id: str
    client_name: str | None = None


@dataclass(frozen=True, slots=True)
class SheetTab:
    title: str
    sheet_id: int


@dataclass(frozen=True, slots=True)
class SheetColumns:
    """Header labels the reader resolved for each logical column."""

    client_id: str | None = None
    brand: str | None = None
    client_name: str | None = None


@dataclass(frozen=True, slots=True)
class ReferenceSheet:
    spreadsheet_id: str
    title: str
    tab: SheetTab
    header_row: int = 0
    columns: SheetColumns = field(default_factory=SheetColumns)
    rows: tuple[InputRow, ...] = ()
    max_rows: int = 0
