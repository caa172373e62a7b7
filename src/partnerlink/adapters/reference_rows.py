"""Turn a raw grid of spreadsheet cells into reference rows.

Both readers fetch a rectangular grid of strings and hand it here. The header
row is detected heuristically within the first rows, then the client id,
brand and client name columns are resolved from header labels, with
configured hints taking precedence over the built-in aliases.
"""

from __future__ import annotations

import logging
import re
from enum import StrEnum
from typing import TYPE_CHECKING, Final

from partnerlink.config.reference_sheet import ColumnHints
from partnerlink.domain.errors import ReferenceSheetError
from partnerlink.domain.model import InputRow, ReferenceSheet, SheetColumns, SheetTab

if TYPE_CHECKING:
    from collections.abc import Sequence

log = logging.getLogger(__name__)

HEADER_SCAN_ROWS: Final[int] = 10

CLIENT_ID_HEADERS: Final[tuple[str, ...]] = (
    "client id",
    "client_id",
    "clientid",
    "bigquery client id",
    "bq client id",
)
BRAND_HEADERS: Final[tuple[str, ...]] = ("brand", "brand name", "partner", "partner name")
CLIENT_NAME_HEADERS: Final[tuple[str, ...]] = (
    "client name",
    "client_name",
    "bigquery client name",
    "bq client name",
)

_NUMBER = re.compile(r"^\d+\.?\d*$")
_DATE = re.compile(r"^\d{1,2}[/-]\d{1,2}[/-]\d{2,4}$")
_SEPARATORS = re.compile(r"[_-]+")
_WHITESPACE = re.compile(r"\s+")


class CellType(StrEnum):
    EMPTY = "empty"
    NUMBER = "number"
    DATE = "date"
    EMAIL = "email"
    TEXT = "text"


def guess_cell_type(value: str) -> CellType:
    trimmed = value.strip()
    if not trimmed:
        return CellType.EMPTY
    if _NUMBER.match(trimmed):
        return CellType.NUMBER
    if _DATE.match(trimmed):
        return CellType.DATE
    if "@" in trimmed:
        return CellType.EMAIL
    return CellType.TEXT


def normalize_header(value: str) -> str:
    """``"Client_ID"`` / ``"client-id"`` / ``" Client  ID "`` -> ``"client id"``."""

    lowered = _SEPARATORS.sub(" ", value.lower())
    return _WHITESPACE.sub(" ", lowered).strip()


def pad_rows(raw_rows: Sequence[Sequence[object]]) -> list[list[str]]:
    """Stringify cells and pad every row to the widest row's length."""

    width = max((len(row) for row in raw_rows), default=0)
    padded: list[list[str]] = []
    for row in raw_rows:
        cells = ["" if cell is None else str(cell) for cell in row]
        cells.extend([""] * (width - len(cells)))
        padded.append(cells)
    return padded


def _row_score(row: Sequence[str], next_row: Sequence[str] | None) -> int:
    score = 0
    non_empty = [cell.strip() for cell in row if cell.strip()]
    score += len(non_empty) * 2

    header_like = [cell for cell in non_empty if len(cell) <= 50 and not _NUMBER.match(cell)]
    score += len(header_like) * 3

    data_like = [cell for cell in row if "@" in cell or "http" in cell or len(cell) > 100]
    score -= len(data_like) * 5

    if next_row is not None:
        current_types = [guess_cell_type(cell) for cell in row]
        next_types = [guess_cell_type(cell) for cell in next_row]
        differing = sum(
            1
            for position, cell_type in enumerate(current_types)
            if position >= len(next_types) or next_types[position] is not cell_type
        )
        if differing > len(current_types) / 2:
            score += 10
    return score


def detect_header_row(rows: Sequence[Sequence[str]], *, scan_rows: int = HEADER_SCAN_ROWS) -> int:
    """Return the 0-based index of the most header-like row among the first rows.

    Earlier rows win ties; a grid with no positive-scoring row yields ``0``.
    """

    best_index = 0
    best_score = 0
    limit = min(len(rows), scan_rows)
    for position in range(limit):
        next_row = rows[position + 1] if position < len(rows) - 1 else None
        score = _row_score(rows[position], next_row)
        if score > best_score:
            best_score = score
            best_index = position
    return best_index


def find_header_index(
    headers: Sequence[str],
    aliases: Sequence[str],
    hint: str | None = None,
) -> int | None:
    """Resolve a logical column to a header position.

    Order: exact match on the hint, exact match on any alias, then the first
    header containing an alias.
    """

    normalized = [normalize_header(header) for header in headers]

    if hint:
        normalized_hint = normalize_header(hint)
        if normalized_hint in normalized:
            return normalized.index(normalized_hint)

    candidates = [normalize_header(alias) for alias in aliases]
    for candidate in candidates:
        if candidate in normalized:
            return normalized.index(candidate)

    for candidate in candidates:
        for position, header in enumerate(normalized):
            if candidate in header:
                return position
    return None


def resolve_tab(tabs: Sequence[SheetTab], *, name: str | None, gid: int) -> SheetTab:
    """Pick the configured tab: by name (case-insensitive), then by gid, then the first."""

    if name:
        wanted = name.lower()
        for tab in tabs:
            if tab.title.lower() == wanted:
                return tab

    for tab in tabs:
        if tab.sheet_id == gid:
            return tab

    if not tabs:
        raise ReferenceSheetError("Reference sheet has no tabs")
    return tabs[0]


def _cell(row: Sequence[str], position: int | None) -> str:
    if position is None or position >= len(row):
        return ""
    return row[position].strip()


def build_reference_sheet(
    raw_rows: Sequence[Sequence[object]],
    *,
    spreadsheet_id: str,
    title: str,
    tab: SheetTab,
    hints: ColumnHints | None = None,
    max_rows: int = 0,
) -> ReferenceSheet:
    """Detect the header, resolve columns and collect the data rows.

    ``row_number`` is the 1-based row position in the tab. Rows with both
    client id and brand blank are dropped; rows with only one of them blank
    are kept so they classify as missing data.
    """

    rows = pad_rows(raw_rows)
    if not rows:
        log.info("Reference tab %r is empty", tab.title)
        return ReferenceSheet(
            spreadsheet_id=spreadsheet_id, title=title, tab=tab, max_rows=max_rows
        )

    hints = hints or ColumnHints()
    header_row = min(detect_header_row(rows), len(rows) - 1)
    headers = rows[header_row]

    client_id_at = find_header_index(headers, CLIENT_ID_HEADERS, hints.client_id)
    brand_at = find_header_index(headers, BRAND_HEADERS, hints.brand)
    client_name_at = find_header_index(headers, CLIENT_NAME_HEADERS, hints.client_name)
    columns = SheetColumns(
        client_id=headers[client_id_at] if client_id_at is not None else None,
        brand=headers[brand_at] if brand_at is not None else None,
        client_name=headers[client_name_at] if client_name_at is not None else None,
    )
    if client_id_at is None or brand_at is None:
        log.warning(
            "Reference tab %r: unresolved columns (client id=%s, brand=%s) in header row %d",
            tab.title,
            columns.client_id,
            columns.brand,
            header_row + 1,
        )

    parsed: list[InputRow] = []
    for position in range(header_row + 1, len(rows)):
        row = rows[position]
        client_id = _cell(row, client_id_at)
        brand = _cell(row, brand_at)
        if not client_id and not brand:
            continue
        parsed.append(
            InputRow(
                row_number=position + 1,
                brand=brand,
                client_id=client_id,
                client_name=_cell(row, client_name_at) or None,
            )
        )

    log.debug(
        "Reference tab %r: header row %d, %d data rows",
        tab.title,
        header_row + 1,
        len(parsed),
    )
    return ReferenceSheet(
        spreadsheet_id=spreadsheet_id,
        title=title,
        tab=tab,
        header_row=header_row,
        columns=columns,
        rows=tuple(parsed),
        max_rows=max_rows,
    )
