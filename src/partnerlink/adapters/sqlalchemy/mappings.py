"""SQLAlchemy mapping metadata for the partnerlink domain model."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from enum import StrEnum
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Index,
    String,
    Table,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    func,
    orm,
)
from sqlalchemy.orm import configure_mappers

from partnerlink.domain.model import EntityType, ExternalMapping, MappingSource, Partner

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


def _enum_values(enum_cls: type[StrEnum]) -> list[str]:
    return [member.value for member in enum_cls]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_N_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

partner_table = Table(
    "partner",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("brand_name", String, nullable=False),
    Index("ix_partner_brand_name", "brand_name"),
)

external_mapping_table = Table(
    "external_mapping",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "entity_type",
        Enum(EntityType, native_enum=False, values_callable=_enum_values),
        nullable=False,
        default=EntityType.PARTNER,
    ),
    Column("entity_id", UUIDColumnType, ForeignKey("partner.id"), nullable=False),
    Column(
        "source",
        Enum(MappingSource, native_enum=False, values_callable=_enum_values),
        nullable=False,
    ),
    Column("external_id", String, nullable=False),
    Column("metadata", JSON, key="meta", nullable=False, default=dict),
    Column("created_at", UTCDateTime(), nullable=True, server_default=func.now()),
    Column("updated_at", UTCDateTime(), nullable=True, server_default=func.now()),
    UniqueConstraint("source", "external_id"),
    Index("ix_external_mapping_entity_source", "entity_id", "source"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(Partner, partner_table)
    mapper_registry.map_imperatively(ExternalMapping, external_mapping_table)

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
