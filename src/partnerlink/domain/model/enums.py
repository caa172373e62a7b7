"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class MappingSource(StrEnum):
    """System that issued an external identifier."""

    WAREHOUSE = "warehouse"
    REFERENCE_SHEET = "reference_sheet"


class EntityType(StrEnum):
    """Owner discriminator for external mappings."""

    PARTNER = "partners"
