"""Application configuration helpers."""

from __future__ import annotations

from .env import (
    env_flag,
    env_float,
    env_int,
    optional_env_var,
    require_env_var,
    require_env_vars,
)
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import (
    RateLimit,
    ResilienceConfig,
    RetryPolicy,
    get_retry_policy,
    get_timeout_seconds,
)
from .logging import configure_logging
from .matching import MatchThresholds, get_match_thresholds
from .reference_sheet import (
    MAX_REFERENCE_ROWS,
    ColumnHints,
    GoogleSheetsConfig,
    ReferenceSheetConfig,
    get_column_hints,
    get_google_sheets_config,
    get_reference_sheet_config,
)
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "MAX_REFERENCE_ROWS",
    "ColumnHints",
    "ConfigurationError",
    "DatabaseConfig",
    "GoogleSheetsConfig",
    "MatchThresholds",
    "MissingConfigurationError",
    "RateLimit",
    "ReferenceSheetConfig",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "configure_logging",
    "env_flag",
    "env_float",
    "env_int",
    "get_column_hints",
    "get_database_config",
    "get_google_sheets_config",
    "get_match_thresholds",
    "get_reference_sheet_config",
    "get_retry_policy",
    "get_storage_config",
    "get_timeout_seconds",
    "optional_env_var",
    "require_env_var",
    "require_env_vars",
]
