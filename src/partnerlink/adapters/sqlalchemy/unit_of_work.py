"""SQLAlchemy session lifecycle for reconciliation runs.

``startup`` binds one process-wide engine (migrated to the latest schema) and
every ``SqlAlchemyReconciliationUnitOfWork`` opens a fresh session from it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from partnerlink.adapters.sqlalchemy.mappings import start_mappers
from partnerlink.adapters.sqlalchemy.migrations import upgrade_head
from partnerlink.adapters.sqlalchemy.repositories import (
    SqlAlchemyExternalMappingRepository,
    SqlAlchemyPartnerRepository,
)
from partnerlink.config.storage import get_database_config
from partnerlink.domain.ports.unit_of_work import ReconciliationRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the SQLAlchemy adapter is used in the wrong lifecycle state."""


class _Runtime:
    __slots__ = ("engine", "sessions")

    def __init__(self) -> None:
        self.engine: Engine | None = None
        self.sessions: sessionmaker[Session] | None = None

    def bind(self, engine: Engine) -> None:
        self.engine = engine
        self.sessions = sessionmaker(bind=engine, expire_on_commit=False)

    def release(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
        self.engine = None
        self.sessions = None

    def require_sessions(self) -> sessionmaker[Session]:
        if self.sessions is None:
            raise StartupError(
                "SQLAlchemy adapter not started; call "
                "partnerlink.adapters.sqlalchemy.startup() before opening a unit of work"
            )
        return self.sessions


_RUNTIME = _Runtime()


def _create_configured_engine(database_uri: str | None) -> Engine:
    if database_uri is not None:
        return create_engine(database_uri, future=True)
    config = get_database_config()
    return create_engine(config.uri, echo=config.echo, future=True)


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Bind the adapter to ``engine`` (or one built from configuration) and migrate it."""

    if _RUNTIME.engine is not None and not force:
        raise StartupError("SQLAlchemy adapter already started; pass force=True to rebind")

    resolved = engine if engine is not None else _create_configured_engine(database_uri)
    start_mappers()
    upgrade_head(engine=resolved)
    _RUNTIME.bind(resolved)
    log.debug("SQLAlchemy adapter started on %s", resolved.url)


def configured_engine() -> Engine | None:
    return _RUNTIME.engine


def is_started() -> bool:
    return _RUNTIME.engine is not None


def shutdown() -> None:
    """Dispose the bound engine; a later ``startup`` may bind a new one."""

    _RUNTIME.release()


class SqlAlchemyReconciliationUnitOfWork:
    """One session wrapping the partner registry and its mappings.

    Leaving the context closes the session; an exception rolls back whatever
    was not committed. Each instance may be entered once at a time.
    """

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        self._sessions = session_factory or _RUNTIME.require_sessions()
        self._session: Session | None = None
        self._repositories: ReconciliationRepositories | None = None

    def __enter__(self) -> SqlAlchemyReconciliationUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work is already open")
        session = self._sessions()
        self._session = session
        self._repositories = ReconciliationRepositories(
            partners=SqlAlchemyPartnerRepository(session),
            external_mappings=SqlAlchemyExternalMappingRepository(session),
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self.session
        try:
            if exc_type is not None:
                session.rollback()
        finally:
            session.close()
            self._session = None
            self._repositories = None
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work is not open")
        return self._session

    @property
    def repositories(self) -> ReconciliationRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work is not open")
        return self._repositories

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


if TYPE_CHECKING:
    from partnerlink.domain.ports.unit_of_work import ReconciliationUnitOfWork

    _uow_check: ReconciliationUnitOfWork = SqlAlchemyReconciliationUnitOfWork()
