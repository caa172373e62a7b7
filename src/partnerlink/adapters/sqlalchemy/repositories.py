"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from partnerlink.adapters.sqlalchemy.mappings import external_mapping_table, partner_table
from partnerlink.domain.model import ExternalMapping, Partner
from partnerlink.domain.ports.persistence import UpsertResult

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.orm import Session

    from partnerlink.domain.model import MappingSource


log = logging.getLogger(__name__)


class SqlAlchemyPartnerRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def list_all(self) -> list[Partner]:
        stmt = select(Partner).order_by(partner_table.c.brand_name, partner_table.c.id)
        return list(self.session.execute(stmt).scalars())

    def get(self, partner_id: uuid.UUID) -> Partner | None:
        return self.session.get(Partner, partner_id)

    def add(self, partner: Partner) -> None:
        self.session.add(partner)


class SqlAlchemyExternalMappingRepository:
    """Mappings keyed by ``(source, external_id)``.

    ``upsert`` runs inside a savepoint so a uniqueness violation only discards
    the offending write and leaves the surrounding session usable.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_by_source(self, source: MappingSource) -> list[ExternalMapping]:
        stmt = (
            select(ExternalMapping)
            .where(external_mapping_table.c.source == source)
            .order_by(external_mapping_table.c.created_at, external_mapping_table.c.id)
        )
        return list(self.session.execute(stmt).scalars())

    def get_by_external_id(self, source: MappingSource, external_id: str) -> ExternalMapping | None:
        stmt = (
            select(ExternalMapping)
            .where(external_mapping_table.c.source == source)
            .where(external_mapping_table.c.external_id == external_id)
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def upsert(self, mapping: ExternalMapping) -> UpsertResult:
        owner = self.get_by_external_id(mapping.source, mapping.external_id)
        if owner is not None and owner.id != mapping.id:
            log.debug(
                "External id %r under %s already owned by mapping %s",
                mapping.external_id,
                mapping.source,
                owner.id,
            )
            return UpsertResult(None, conflict=True)

        savepoint = self.session.begin_nested()
        try:
            stored = self.session.get(ExternalMapping, mapping.id)
            if stored is None:
                self.session.add(mapping)
                stored, created = mapping, True
            else:
                stored.rebind(mapping.external_id, dict(mapping.meta), at=mapping.updated_at)
                created = False
            self.session.flush()
        except IntegrityError:
            savepoint.rollback()
            log.debug(
                "Uniqueness violation writing %r under %s", mapping.external_id, mapping.source
            )
            return UpsertResult(None, conflict=True)
        savepoint.commit()
        return UpsertResult(stored, created=created)
