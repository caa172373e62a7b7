"""Google Sheets API v4 response schemas (only the fields we request)."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

type CellValue = str | int | float | bool | None


class SheetsBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class SheetProperties(SheetsBaseModel):
    sheet_id: int = Field(alias="sheetId")
    title: str
    index: int = 0


class Sheet(SheetsBaseModel):
    properties: SheetProperties


class SpreadsheetProperties(SheetsBaseModel):
    title: str = ""


class Spreadsheet(SheetsBaseModel):
    spreadsheet_id: str = Field(alias="spreadsheetId")
    properties: SpreadsheetProperties = Field(default_factory=SpreadsheetProperties)
    sheets: list[Sheet] = Field(default_factory=list)


class ValueRange(SheetsBaseModel):
    range: str = ""
    major_dimension: str = Field(default="ROWS", alias="majorDimension")
    values: list[list[CellValue]] = Field(default_factory=list)
