"""Partner registry records."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field


@dataclass(eq=False, kw_only=True)
class Partner:
    """A canonical advertising partner as held by the registry."""

    brand_name: str
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def __repr__(self) -> str:
        return f"Partner(id={self.id}, brand_name={self.brand_name!r})"
