"""Brand-name canonical forms used by the matcher tiers.

Three progressively more aggressive forms:
- ``normalize_name``: diacritics folded, lowercase, whitespace collapsed
- ``compact_name``: ``normalize_name`` without punctuation or spacing
- ``canonical_compact_name``: ``compact_name`` without corporate noise words

All functions are pure and total. Feeding a form back into the same function
returns the same form.
"""

from __future__ import annotations

import re
import unicodedata
from typing import Final

CANONICAL_NOISE_TOKENS: Final[frozenset[str]] = frozenset(
    {
        "and",
        "ca",
        "co",
        "company",
        "corp",
        "corporation",
        "group",
        "holdings",
        "inc",
        "incorporated",
        "international",
        "intl",
        "limited",
        "llc",
        "ltd",
        "mx",
        "official",
        "plc",
        "pty",
        "shop",
        "the",
        "uk",
        "us",
        "usa",
    }
)

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def fold_to_ascii(value: str) -> str:
    """Decompose and drop combining marks (``Café`` -> ``Cafe``)."""

    decomposed = unicodedata.normalize("NFKD", value)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_name(value: str) -> str:
    return " ".join(fold_to_ascii(value).lower().split())


def compact_name(value: str) -> str:
    return _NON_ALNUM.sub("", normalize_name(value))


def tokenize_name(value: str) -> list[str]:
    return [token for token in _NON_ALNUM.split(fold_to_ascii(value).lower()) if token]


def canonical_compact_name(value: str) -> str:
    filtered = [token for token in tokenize_name(value) if token not in CANONICAL_NOISE_TOKENS]
    return "".join(filtered) or compact_name(value)


def normalize_key(value: str) -> str:
    """Comparison key for external identifiers (client ids)."""

    return value.strip().lower()
