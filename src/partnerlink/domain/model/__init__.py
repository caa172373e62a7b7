"""Public domain model surface."""

from __future__ import annotations

from partnerlink.domain.model.enums import EntityType, MappingSource
from partnerlink.domain.model.external_ids import ExternalMapping, utcnow
from partnerlink.domain.model.partner import Partner
from partnerlink.domain.model.reference_sheet import (
    InputRow,
    ReferenceSheet,
    SheetColumns,
    SheetTab,
)

__all__ = [
    "EntityType",
    "ExternalMapping",
    "InputRow",
    "MappingSource",
    "Partner",
    "ReferenceSheet",
    "SheetColumns",
    "SheetTab",
    "utcnow",
]
