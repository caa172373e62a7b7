"""Google Sheets reference reader."""

from __future__ import annotations

from .client import GoogleSheetsAPIError, GoogleSheetsClient, a1_range
from .reader import GoogleSheetsReferenceReader
from .schema import Sheet, SheetProperties, Spreadsheet, ValueRange

__all__ = [
    "GoogleSheetsAPIError",
    "GoogleSheetsClient",
    "GoogleSheetsReferenceReader",
    "Sheet",
    "SheetProperties",
    "Spreadsheet",
    "ValueRange",
    "a1_range",
]
