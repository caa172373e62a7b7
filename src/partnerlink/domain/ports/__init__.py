"""Ports connecting the reconciliation core to its collaborators."""

from __future__ import annotations

from .cache import CacheInvalidator, NullCacheInvalidator
from .fetching import ReferenceSheetReader
from .persistence import ExternalMappingRepository, PartnerRepository, UpsertResult
from .unit_of_work import (
    ReconciliationRepositories,
    ReconciliationUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "CacheInvalidator",
    "ExternalMappingRepository",
    "NullCacheInvalidator",
    "PartnerRepository",
    "ReconciliationRepositories",
    "ReconciliationUnitOfWork",
    "ReferenceSheetReader",
    "RepositoryCollection",
    "UnitOfWork",
    "UpsertResult",
]
