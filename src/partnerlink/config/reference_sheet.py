"""Reference spreadsheet location and column hints."""

from __future__ import annotations

from dataclasses import dataclass, field

from .env import env_int, optional_env_var, require_env_var
from .http_resilience import RateLimit, ResilienceConfig, get_retry_policy, get_timeout_seconds

DEFAULT_REFERENCE_TAB_GID = 0
MAX_REFERENCE_ROWS = 5000
GOOGLE_SHEETS_BASE_URL = "https://sheets.googleapis.com/v4/"
# per-user read quota of the Sheets API
GOOGLE_SHEETS_READS_PER_MINUTE = 60


@dataclass(frozen=True, slots=True)
class ColumnHints:
    """Header labels that take precedence over the built-in header aliases."""

    client_id: str | None = None
    brand: str | None = None
    client_name: str | None = None


@dataclass(frozen=True, slots=True)
class ReferenceSheetConfig:
    spreadsheet_id: str
    tab_name: str | None = None
    tab_gid: int = DEFAULT_REFERENCE_TAB_GID
    max_rows: int = MAX_REFERENCE_ROWS
    column_hints: ColumnHints = field(default_factory=ColumnHints)


@dataclass(frozen=True, slots=True)
class GoogleSheetsConfig:
    access_token: str
    resilience: ResilienceConfig


def get_column_hints() -> ColumnHints:
    return ColumnHints(
        client_id=optional_env_var("PARTNERLINK_REFERENCE_SHEET_CLIENT_ID_COLUMN"),
        brand=optional_env_var("PARTNERLINK_REFERENCE_SHEET_BRAND_COLUMN"),
        client_name=optional_env_var("PARTNERLINK_REFERENCE_SHEET_CLIENT_NAME_COLUMN"),
    )


def get_reference_sheet_config(*, spreadsheet_id: str | None = None) -> ReferenceSheetConfig:
    return ReferenceSheetConfig(
        spreadsheet_id=spreadsheet_id or require_env_var("PARTNERLINK_REFERENCE_SHEET_ID"),
        tab_name=optional_env_var("PARTNERLINK_REFERENCE_SHEET_TAB_NAME"),
        tab_gid=env_int("PARTNERLINK_REFERENCE_SHEET_TAB_GID", DEFAULT_REFERENCE_TAB_GID),
        max_rows=env_int("PARTNERLINK_REFERENCE_SHEET_MAX_ROWS", MAX_REFERENCE_ROWS),
        column_hints=get_column_hints(),
    )


def get_google_sheets_config(*, access_token: str | None = None) -> GoogleSheetsConfig:
    token = access_token or require_env_var("GOOGLE_SHEETS_ACCESS_TOKEN")
    return GoogleSheetsConfig(
        access_token=token,
        resilience=ResilienceConfig(
            name="google-sheets",
            base_url=GOOGLE_SHEETS_BASE_URL,
            timeout_seconds=get_timeout_seconds(),
            retry=get_retry_policy(),
            ratelimit=RateLimit.per_minute(GOOGLE_SHEETS_READS_PER_MINUTE),
            default_headers={"Authorization": f"Bearer {token}"},
        ),
    )
