"""Amazon marketplace codes and free-text inference.

The alias table is additive: new codes can be appended without changing how
existing mappings are interpreted.
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from typing import Final

SUFFIX_CODE_SCORE: Final[int] = 100


@dataclass(frozen=True, slots=True)
class Marketplace:
    code: str
    name: str
    aliases: tuple[str, ...] = ()

    @property
    def labels(self) -> tuple[str, ...]:
        return (self.code, self.name, *self.aliases)


AMAZON_MARKETPLACES: Final[tuple[Marketplace, ...]] = (
    Marketplace("US", "United States", ("usa", "united states", "na us")),
    Marketplace("CA", "Canada", ("canada", "na ca")),
    Marketplace("MX", "Mexico", ("mexico", "na mx")),
    Marketplace("BR", "Brazil", ("brazil", "na br")),
    Marketplace("UK", "United Kingdom", ("united kingdom", "great britain", "gb", "eu uk")),
    Marketplace("DE", "Germany", ("germany", "deutschland", "eu de")),
    Marketplace("FR", "France", ("france", "eu fr")),
    Marketplace("IT", "Italy", ("italy", "eu it")),
    Marketplace("ES", "Spain", ("spain", "eu es")),
    Marketplace("NL", "Netherlands", ("netherlands", "holland", "eu nl")),
    Marketplace("SE", "Sweden", ("sweden", "eu se")),
    Marketplace("PL", "Poland", ("poland", "eu pl")),
    Marketplace("BE", "Belgium", ("belgium", "eu be")),
    Marketplace("IE", "Ireland", ("ireland", "eu ie")),
    Marketplace("TR", "Turkey", ("turkey", "trkiye")),
    Marketplace("JP", "Japan", ("japan", "apac jp")),
    Marketplace("AU", "Australia", ("australia", "apac au")),
    Marketplace("SG", "Singapore", ("singapore", "apac sg")),
    Marketplace("IN", "India", ("india", "apac in")),
    Marketplace("AE", "United Arab Emirates", ("uae", "united arab emirates", "mena ae")),
    Marketplace("SA", "Saudi Arabia", ("ksa", "saudi arabia", "mena sa")),
    Marketplace("EG", "Egypt", ("egypt", "mena eg")),
    Marketplace("ZA", "South Africa", ("south africa", "za")),
)

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def _normalize_alias(value: str) -> str:
    folded = "".join(
        ch for ch in unicodedata.normalize("NFKD", value) if not unicodedata.combining(ch)
    )
    return _NON_ALNUM.sub(" ", folded.lower()).strip()


MARKETPLACE_BY_CODE: Final[dict[str, Marketplace]] = {
    marketplace.code: marketplace for marketplace in AMAZON_MARKETPLACES
}
_CODE_BY_ALIAS: Final[dict[str, str]] = {
    _normalize_alias(label): marketplace.code
    for marketplace in AMAZON_MARKETPLACES
    for label in marketplace.labels
}


def normalize_marketplace_code(value: str | None) -> str | None:
    """Map a code, name or alias (``"deutschland"``, ``"eu de"``) to its code."""

    if not value:
        return None
    normalized = _normalize_alias(value)
    if not normalized:
        return None
    return _CODE_BY_ALIAS.get(normalized)


def infer_marketplace_code(*values: str | None) -> str | None:
    """Infer a marketplace code from free text such as client id, name and brand.

    Returns ``None`` when nothing matches or when the two best marketplaces
    score equally.
    """

    text = " ".join(value for value in values if value and value.strip())
    if not text:
        return None

    haystack = f" {_normalize_alias(text)} "
    tokens = haystack.split()
    last_token = tokens[-1] if tokens else ""

    scores: dict[str, int] = {}
    for marketplace in AMAZON_MARKETPLACES:
        score = 0
        for label in marketplace.labels:
            needle = _normalize_alias(label)
            if needle and f" {needle} " in haystack:
                score = max(score, len(needle))
        if last_token == marketplace.code.lower():
            score = max(score, SUFFIX_CODE_SCORE)
        if score > 0:
            scores[marketplace.code] = score

    if not scores:
        return None
    ranked = sorted(scores.items(), key=lambda item: -item[1])
    if len(ranked) > 1 and ranked[0][1] == ranked[1][1]:
        return None
    return ranked[0][0]
