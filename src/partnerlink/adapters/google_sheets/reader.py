"""Reference sheet reader backed by the Google Sheets API."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from partnerlink.adapters.reference_rows import build_reference_sheet, resolve_tab
from partnerlink.domain.model import SheetTab

from .client import GoogleSheetsClient, a1_range

if TYPE_CHECKING:
    from partnerlink.config.reference_sheet import GoogleSheetsConfig, ReferenceSheetConfig
    from partnerlink.domain.model import ReferenceSheet

    from .schema import Spreadsheet, ValueRange

log = logging.getLogger(__name__)


class SheetsClient(Protocol):
    def fetch_spreadsheet(self, spreadsheet_id: str) -> Spreadsheet: ...

    def fetch_values(self, spreadsheet_id: str, a1: str) -> ValueRange: ...


class GoogleSheetsReferenceReader:
    """Read the configured reference tab in two calls: metadata, then values."""

    def __init__(
        self,
        *,
        config: ReferenceSheetConfig,
        sheets_config: GoogleSheetsConfig | None = None,
        client: SheetsClient | None = None,
    ) -> None:
        if client is None:
            if sheets_config is None:
                raise ValueError("Either a Sheets client or a GoogleSheetsConfig is required")
            client = GoogleSheetsClient(config=sheets_config)
        self._config = config
        self._client = client

    def read(self) -> ReferenceSheet:
        config = self._config
        spreadsheet = self._client.fetch_spreadsheet(config.spreadsheet_id)
        tabs = [
            SheetTab(title=sheet.properties.title, sheet_id=sheet.properties.sheet_id)
            for sheet in sorted(spreadsheet.sheets, key=lambda sheet: sheet.properties.index)
        ]
        tab = resolve_tab(tabs, name=config.tab_name, gid=config.tab_gid)
        log.info(
            "Reading reference sheet %r tab %r (gid %d)",
            spreadsheet.properties.title,
            tab.title,
            tab.sheet_id,
        )

        a1 = a1_range(tab.title, config.max_rows)
        values = self._client.fetch_values(config.spreadsheet_id, a1)
        return build_reference_sheet(
            values.values,
            spreadsheet_id=config.spreadsheet_id,
            title=spreadsheet.properties.title,
            tab=tab,
            hints=config.column_hints,
            max_rows=config.max_rows,
        )
