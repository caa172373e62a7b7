"""Lookup tables from normalized brand names to partners."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .normalize import canonical_compact_name, compact_name, normalize_name

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping
    from uuid import UUID

    from partnerlink.domain.model import Partner


type NameIndex = Mapping[str, tuple[UUID, ...]]


@dataclass(frozen=True, slots=True)
class CandidateIndex:
    """Partner ids keyed by each canonical form of their brand name.

    Values are tuples because distinct partners can share a key; that is what
    lets the matcher report ambiguity instead of picking one.
    """

    exact: NameIndex = field(default_factory=dict)
    compact: NameIndex = field(default_factory=dict)
    canonical: NameIndex = field(default_factory=dict)
    partners_by_id: Mapping[UUID, Partner] = field(default_factory=dict)

    @classmethod
    def build(cls, partners: Iterable[Partner]) -> CandidateIndex:
        partners_by_id: dict[UUID, Partner] = {}
        exact: defaultdict[str, list[UUID]] = defaultdict(list)
        compact: defaultdict[str, list[UUID]] = defaultdict(list)
        canonical: defaultdict[str, list[UUID]] = defaultdict(list)

        for partner in partners:
            if partner.id in partners_by_id:
                continue
            partners_by_id[partner.id] = partner
            _add(exact, normalize_name, partner)
            _add(compact, compact_name, partner)
            _add(canonical, canonical_compact_name, partner)

        return cls(
            exact=_freeze(exact),
            compact=_freeze(compact),
            canonical=_freeze(canonical),
            partners_by_id=partners_by_id,
        )

    def hydrate(self, partner_ids: Iterable[UUID]) -> tuple[Partner, ...]:
        return tuple(self.partners_by_id[partner_id] for partner_id in partner_ids)

    def __len__(self) -> int:
        return len(self.partners_by_id)


def _add(
    table: defaultdict[str, list[UUID]],
    form: Callable[[str], str],
    partner: Partner,
) -> None:
    key = form(partner.brand_name)
    if key:
        table[key].append(partner.id)


def _freeze(table: defaultdict[str, list[UUID]]) -> dict[str, tuple[UUID, ...]]:
    return {key: tuple(ids) for key, ids in table.items()}
