from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker

from partnerlink.adapters.sqlalchemy import start_mappers
from partnerlink.adapters.sqlalchemy.migrations import upgrade_head
from partnerlink.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyReconciliationUnitOfWork,
    shutdown,
    startup,
)
from partnerlink.domain.model import Partner

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


@pytest.fixture(autouse=True)
def _isolate_partnerlink_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in list(os.environ):
        if name.startswith(("PARTNERLINK_", "GOOGLE_SHEETS_")):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    start_mappers()
    upgrade_head(engine=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, future=True, expire_on_commit=False)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyReconciliationUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)
    try:
        yield SqlAlchemyReconciliationUnitOfWork
    finally:
        shutdown()


@pytest.fixture
def seed_partners(
    sqlite_unit_of_work: Callable[[], SqlAlchemyReconciliationUnitOfWork],
) -> Callable[..., list[Partner]]:
    def seed(*brand_names: str) -> list[Partner]:
        partners = [Partner(brand_name=name) for name in brand_names]
        with sqlite_unit_of_work() as uow:
            for partner in partners:
                uow.repositories.partners.add(partner)
            uow.commit()
        return partners

    return seed
