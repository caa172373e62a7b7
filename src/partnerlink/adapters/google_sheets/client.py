"""Google Sheets API client."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING
from urllib.parse import quote

from pydantic import ValidationError

from partnerlink.adapters.http_resilience import ResilientClient, UpstreamHTTPError
from partnerlink.domain.errors import ReferenceSheetError

from .schema import Spreadsheet, ValueRange

if TYPE_CHECKING:
    from collections.abc import Callable

    from pydantic import BaseModel

    from partnerlink.config.http_resilience import ResilienceConfig
    from partnerlink.config.reference_sheet import GoogleSheetsConfig

log = getLogger(__name__)

SPREADSHEET_FIELDS = "spreadsheetId,properties.title,sheets.properties(sheetId,title,index)"
LAST_COLUMN = "ZZ"


class GoogleSheetsAPIError(ReferenceSheetError):
    """Raised when the Sheets API fails or returns an unexpected payload."""


def a1_range(tab_title: str, max_rows: int) -> str:
    """``'Tab ''quoted'''!A1:ZZ<max_rows>``; quotes inside the title are doubled."""

    escaped = tab_title.replace("'", "''")
    return f"'{escaped}'!A1:{LAST_COLUMN}{max_rows}"


class GoogleSheetsClient:
    """Low-level HTTP client for the Google Sheets API."""

    def __init__(
        self,
        *,
        config: GoogleSheetsConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    def fetch_spreadsheet(self, spreadsheet_id: str) -> Spreadsheet:
        return asyncio.run(self._fetch_spreadsheet_async(spreadsheet_id))

    def fetch_values(self, spreadsheet_id: str, a1: str) -> ValueRange:
        return asyncio.run(self._fetch_values_async(spreadsheet_id, a1))

    async def _fetch_spreadsheet_async(self, spreadsheet_id: str) -> Spreadsheet:
        async with self._client_factory(self._resilience) as client:
            payload = await self._perform_request(
                client=client,
                path=f"spreadsheets/{quote(spreadsheet_id, safe='')}",
                params={"fields": SPREADSHEET_FIELDS},
            )
        return _validate(Spreadsheet, payload)

    async def _fetch_values_async(self, spreadsheet_id: str, a1: str) -> ValueRange:
        async with self._client_factory(self._resilience) as client:
            payload = await self._perform_request(
                client=client,
                path=f"spreadsheets/{quote(spreadsheet_id, safe='')}/values/{quote(a1, safe='')}",
                params={"majorDimension": "ROWS"},
            )
        return _validate(ValueRange, payload)

    async def _perform_request(
        self,
        *,
        client: ResilientClient,
        path: str,
        params: dict[str, str],
    ) -> dict[str, object]:
        if self._resilience.base_url is None:
            raise GoogleSheetsAPIError("Missing Google Sheets base_url in resilience configuration")
        try:
            return await client.get_json(path, params=params)
        except UpstreamHTTPError as exc:
            raise GoogleSheetsAPIError(f"Google Sheets request failed: {exc}") from exc


def _validate[TModel: BaseModel](model: type[TModel], payload: dict[str, object]) -> TModel:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        log.debug("Rejected Google Sheets payload: %s", payload)
        raise GoogleSheetsAPIError(f"Malformed Google Sheets {model.__name__} payload") from exc
