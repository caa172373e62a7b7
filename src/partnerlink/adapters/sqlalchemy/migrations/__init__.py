"""Bundled Alembic migrations for the partner registry schema."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Final

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory

from partnerlink.config.storage import get_database_config

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

MIGRATIONS_PATH: Final[Path] = Path(__file__).resolve().parent


def build_config(database_uri: str | None = None) -> Config:
    """Alembic config for the scripts shipped in this package; no ini file involved."""

    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_PATH))
    if database_uri is not None:
        config.set_main_option("sqlalchemy.url", database_uri)
    return config


def head_revision() -> str | None:
    return ScriptDirectory.from_config(build_config()).get_current_head()


def current_revision(engine: Engine) -> str | None:
    """Revision stamped in ``engine``'s database, ``None`` for an empty database."""

    with engine.connect() as connection:
        return MigrationContext.configure(connection).get_current_revision()


def upgrade_head(*, engine: Engine | None = None, database_uri: str | None = None) -> None:
    """Bring the schema up to the latest revision.

    With ``engine`` the upgrade runs on one of its connections inside a single
    transaction, which lets in-memory SQLite databases be migrated.
    """

    if engine is None:
        command.upgrade(build_config(database_uri or get_database_config().uri), "head")
        return
    config = build_config()
    with engine.begin() as connection:
        config.attributes["connection"] = connection
        command.upgrade(config, "head")
