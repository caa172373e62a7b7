from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from partnerlink.adapters.csv_reader import CsvReferenceReader
from partnerlink.config import ColumnHints
from partnerlink.domain.errors import ReferenceSheetError

if TYPE_CHECKING:
    from pathlib import Path


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_reads_csv_export(tmp_path: Path) -> None:
    path = _write(
        tmp_path / "brands.csv",
        "Brand,Client ID,Client Name\nAcme,1001,Acme US\n\"Globex, Inc\",1002,\n",
    )

    sheet = CsvReferenceReader(path).read()

    assert sheet.title == "brands.csv"
    assert sheet.tab.title == "brands"
    assert sheet.spreadsheet_id == str(path)
    assert [(row.row_number, row.brand, row.client_id) for row in sheet.rows] == [
        (2, "Acme", "1001"),
        (3, "Globex, Inc", "1002"),
    ]
    assert sheet.rows[1].client_name is None


def test_strips_byte_order_mark(tmp_path: Path) -> None:
    path = tmp_path / "brands.csv"
    path.write_bytes("\ufeffBrand,Client ID\nAcme,1001\n".encode())

    sheet = CsvReferenceReader(path).read()

    assert sheet.columns.brand == "Brand"
    assert sheet.rows[0].brand == "Acme"


def test_respects_max_rows(tmp_path: Path) -> None:
    lines = ["Brand,Client ID"] + [f"Brand {number},C-{number}" for number in range(10)]
    path = _write(tmp_path / "brands.csv", "\n".join(lines) + "\n")

    sheet = CsvReferenceReader(path, max_rows=4).read()

    assert len(sheet.rows) == 3
    assert sheet.max_rows == 4


def test_column_hints(tmp_path: Path) -> None:
    path = _write(tmp_path / "brands.csv", "Brand,Account,Client ID\nAcme,A-1,C-1\n")

    sheet = CsvReferenceReader(path, hints=ColumnHints(client_id="account")).read()

    assert sheet.rows[0].client_id == "A-1"


def test_missing_file_raises_reference_error(tmp_path: Path) -> None:
    with pytest.raises(ReferenceSheetError):
        CsvReferenceReader(tmp_path / "missing.csv").read()
