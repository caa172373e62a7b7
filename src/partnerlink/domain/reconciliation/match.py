"""Multi-tier brand matcher.

Tiers run from strictest to loosest and the first tier that reaches a
decision wins:

1. exact      ``normalize_name`` lookup
2. compact    ``compact_name`` lookup
3. canonical  ``canonical_compact_name`` lookup
4. containment  one canonical key contains the other, scored by length ratio
5. typo       Levenshtein distance on canonical keys

Every tier separates "one partner" from "several partners". Several partners
end the search as ambiguous; lower tiers never break a tie found above them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rapidfuzz.distance import Levenshtein

from partnerlink.config.matching import MatchThresholds

from .contracts import MatchResult, MatchTier, MatchType
from .normalize import canonical_compact_name, compact_name, normalize_name

if TYPE_CHECKING:
    from uuid import UUID

    from partnerlink.domain.model import Partner

    from .index import CandidateIndex, NameIndex


log = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ScoredCandidate:
    partner: Partner
    score: float


@dataclass(slots=True)
class PartnerMatcher:
    """Resolve brand names against one ``CandidateIndex``."""

    index: CandidateIndex
    thresholds: MatchThresholds = field(default_factory=MatchThresholds)

    def __call__(self, brand: str) -> MatchResult:
        return self.match(brand)

    def match(self, brand: str) -> MatchResult:
        normalized = normalize_name(brand)
        if not normalized:
            return MatchResult.no_match()
        decision = self._lookup(self.index.exact, normalized, MatchType.EXACT, MatchTier.EXACT)
        if decision is not None:
            return decision

        compact = compact_name(brand)
        if not compact:
            return MatchResult.no_match()
        decision = self._lookup(
            self.index.compact, compact, MatchType.NORMALIZED, MatchTier.COMPACT
        )
        if decision is not None:
            return decision

        canonical = canonical_compact_name(brand)
        if not canonical:
            return MatchResult.no_match()
        decision = self._lookup(
            self.index.canonical, canonical, MatchType.NORMALIZED, MatchTier.CANONICAL
        )
        if decision is not None:
            return decision

        decision = self._containment(canonical)
        if decision is not None:
            return decision

        decision = self._typo(canonical)
        if decision is not None:
            return decision

        log.debug("No partner match for brand=%r (canonical=%r)", brand, canonical)
        return MatchResult.no_match()

    def _lookup(
        self,
        table: NameIndex,
        key: str,
        match_type: MatchType,
        tier: MatchTier,
    ) -> MatchResult | None:
        partner_ids = table.get(key, ())
        if not partner_ids:
            return None
        partners = self.index.hydrate(partner_ids)
        if len(partners) == 1:
            return MatchResult.unique(partners[0], match_type, tier)
        log.debug("Ambiguous %s match for key=%r: %d partners", tier, key, len(partners))
        return MatchResult.tie(partners, tier)

    def containment_candidates(self, canonical: str) -> list[ScoredCandidate]:
        """Partners whose canonical key contains (or is contained by) ``canonical``.

        Each partner keeps its best score; the list is sorted best first.
        """

        limits = self.thresholds
        best_by_partner: dict[UUID, ScoredCandidate] = {}
        for partner_key, partner_ids in self.index.canonical.items():
            if canonical not in partner_key and partner_key not in canonical:
                continue
            shortest = min(len(canonical), len(partner_key))
            longest = max(len(canonical), len(partner_key))
            if shortest < limits.min_containment_length:
                continue
            score = shortest / longest
            if score < limits.containment_min_score:
                continue
            for partner in self.index.hydrate(partner_ids):
                existing = best_by_partner.get(partner.id)
                if existing is None or score > existing.score:
                    best_by_partner[partner.id] = ScoredCandidate(partner=partner, score=score)
        return sorted(best_by_partner.values(), key=lambda candidate: -candidate.score)

    def _containment(self, canonical: str) -> MatchResult | None:
        candidates = self.containment_candidates(canonical)
        if not candidates:
            return None
        if len(candidates) == 1:
            return MatchResult.unique(
                candidates[0].partner, MatchType.NORMALIZED, MatchTier.CONTAINMENT
            )

        top, runner_up = candidates[0], candidates[1]
        limits = self.thresholds
        if (
            top.score - runner_up.score >= limits.containment_min_gap
            and top.score >= limits.containment_min_top_score
        ):
            return MatchResult.unique(top.partner, MatchType.NORMALIZED, MatchTier.CONTAINMENT)

        log.debug(
            "Ambiguous containment match for %r: top=%.3f runner_up=%.3f",
            canonical,
            top.score,
            runner_up.score,
        )
        return MatchResult.tie(
            tuple(candidate.partner for candidate in candidates), MatchTier.CONTAINMENT
        )

    def _typo(self, canonical: str) -> MatchResult | None:
        limits = self.thresholds
        best_distance: int | None = None
        best_ids: list[UUID] = []
        for partner_key, partner_ids in self.index.canonical.items():
            longest = max(len(canonical), len(partner_key))
            if longest < limits.min_typo_length:
                continue
            max_distance = limits.max_typo_distance(longest)
            distance = Levenshtein.distance(canonical, partner_key, score_cutoff=max_distance)
            if distance > max_distance:
                continue
            if best_distance is None or distance < best_distance:
                best_distance = distance
                best_ids = list(partner_ids)
            elif distance == best_distance:
                best_ids.extend(partner_ids)

        if not best_ids:
            return None

        unique_ids = list(dict.fromkeys(best_ids))
        partners = self.index.hydrate(unique_ids)
        if len(partners) == 1:
            return MatchResult.unique(partners[0], MatchType.NORMALIZED, MatchTier.TYPO)
        log.debug(
            "Ambiguous typo match for %r at distance %s: %d partners",
            canonical,
            best_distance,
            len(partners),
        )
        return MatchResult.tie(partners, MatchTier.TYPO)


def match_partner(
    brand: str,
    index: CandidateIndex,
    *,
    thresholds: MatchThresholds | None = None,
) -> MatchResult:
    """Resolve one brand name against ``index``."""

    matcher = PartnerMatcher(index=index, thresholds=thresholds or MatchThresholds())
    return matcher.match(brand)
