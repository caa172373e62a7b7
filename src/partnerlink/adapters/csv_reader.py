"""Reference sheet reader for a CSV export of the reference tab."""

from __future__ import annotations

import csv
import logging
from typing import TYPE_CHECKING

from partnerlink.adapters.reference_rows import build_reference_sheet
from partnerlink.config.reference_sheet import MAX_REFERENCE_ROWS, ColumnHints
from partnerlink.domain.errors import ReferenceSheetError
from partnerlink.domain.model import SheetTab

if TYPE_CHECKING:
    from pathlib import Path

    from partnerlink.domain.model import ReferenceSheet

log = logging.getLogger(__name__)


class CsvReferenceReader:
    """Treat a CSV file as a single-tab spreadsheet named after the file."""

    def __init__(
        self,
        path: Path,
        *,
        hints: ColumnHints | None = None,
        max_rows: int = MAX_REFERENCE_ROWS,
        encoding: str = "utf-8-sig",
    ) -> None:
        self.path = path
        self.hints = hints or ColumnHints()
        self.max_rows = max_rows
        self.encoding = encoding

    def read(self) -> ReferenceSheet:
        try:
            with self.path.open(newline="", encoding=self.encoding) as handle:
                raw_rows: list[list[str]] = []
                for row in csv.reader(handle):
                    if len(raw_rows) >= self.max_rows:
                        break
                    raw_rows.append(row)
        except (OSError, UnicodeDecodeError, csv.Error) as exc:
            raise ReferenceSheetError(f"Cannot read reference CSV {self.path}: {exc}") from exc

        log.info("Read %d raw rows from %s", len(raw_rows), self.path)
        return build_reference_sheet(
            raw_rows,
            spreadsheet_id=str(self.path),
            title=self.path.name,
            tab=SheetTab(title=self.path.stem, sheet_id=0),
            hints=self.hints,
            max_rows=self.max_rows,
        )
