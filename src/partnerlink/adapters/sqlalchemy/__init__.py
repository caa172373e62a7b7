"""SQLAlchemy adapter package for partnerlink."""

from __future__ import annotations

from .mappings import (
    create_all_tables,
    external_mapping_table,
    mapper_registry,
    partner_table,
    start_mappers,
)
from .repositories import SqlAlchemyExternalMappingRepository, SqlAlchemyPartnerRepository
from .unit_of_work import (
    SqlAlchemyReconciliationUnitOfWork,
    StartupError,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyExternalMappingRepository",
    "SqlAlchemyPartnerRepository",
    "SqlAlchemyReconciliationUnitOfWork",
    "StartupError",
    "create_all_tables",
    "external_mapping_table",
    "mapper_registry",
    "partner_table",
    "shutdown",
    "start_mappers",
    "startup",
]
