"""Tunable thresholds for the fuzzy partner matcher.

Defaults are the production tuning. Override them through the
``PARTNERLINK_MATCH_*`` environment variables.
"""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_float, env_int
from .errors import ConfigurationError

DEFAULT_MIN_CONTAINMENT_LENGTH = 5
DEFAULT_CONTAINMENT_MIN_SCORE = 0.45
DEFAULT_CONTAINMENT_MIN_GAP = 0.18
DEFAULT_CONTAINMENT_MIN_TOP_SCORE = 0.55
DEFAULT_MIN_TYPO_LENGTH = 5
DEFAULT_LONG_NAME_LENGTH = 10
DEFAULT_SHORT_NAME_MAX_DISTANCE = 1
DEFAULT_LONG_NAME_MAX_DISTANCE = 2

ENV_PREFIX = "PARTNERLINK_MATCH_"


@dataclass(frozen=True, slots=True)
class MatchThresholds:
    """Scoring constants for the containment and typo tiers."""

    min_containment_length: int = DEFAULT_MIN_CONTAINMENT_LENGTH
    containment_min_score: float = DEFAULT_CONTAINMENT_MIN_SCORE
    containment_min_gap: float = DEFAULT_CONTAINMENT_MIN_GAP
    containment_min_top_score: float = DEFAULT_CONTAINMENT_MIN_TOP_SCORE
    min_typo_length: int = DEFAULT_MIN_TYPO_LENGTH
    long_name_length: int = DEFAULT_LONG_NAME_LENGTH
    short_name_max_distance: int = DEFAULT_SHORT_NAME_MAX_DISTANCE
    long_name_max_distance: int = DEFAULT_LONG_NAME_MAX_DISTANCE

    def __post_init__(self) -> None:
        for name in ("containment_min_score", "containment_min_gap", "containment_min_top_score"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ConfigurationError(
                    f"{name} must be within [0, 1], got {value}",
                    variable=f"{ENV_PREFIX}{name.upper()}",
                )
        if self.short_name_max_distance > self.long_name_max_distance:
            raise ConfigurationError(
                "short_name_max_distance must not exceed long_name_max_distance",
                variable=f"{ENV_PREFIX}SHORT_NAME_MAX_DISTANCE",
            )

    def max_typo_distance(self, longest: int) -> int:
        if longest >= self.long_name_length:
            return self.long_name_max_distance
        return self.short_name_max_distance


def get_match_thresholds() -> MatchThresholds:
    return MatchThresholds(
        min_containment_length=env_int(
            "PARTNERLINK_MATCH_MIN_CONTAINMENT_LENGTH", DEFAULT_MIN_CONTAINMENT_LENGTH
        ),
        containment_min_score=env_float(
            "PARTNERLINK_MATCH_CONTAINMENT_MIN_SCORE", DEFAULT_CONTAINMENT_MIN_SCORE
        ),
        containment_min_gap=env_float(
            "PARTNERLINK_MATCH_CONTAINMENT_MIN_GAP", DEFAULT_CONTAINMENT_MIN_GAP
        ),
        containment_min_top_score=env_float(
            "PARTNERLINK_MATCH_CONTAINMENT_MIN_TOP_SCORE", DEFAULT_CONTAINMENT_MIN_TOP_SCORE
        ),
        min_typo_length=env_int("PARTNERLINK_MATCH_MIN_TYPO_LENGTH", DEFAULT_MIN_TYPO_LENGTH),
        long_name_length=env_int("PARTNERLINK_MATCH_LONG_NAME_LENGTH", DEFAULT_LONG_NAME_LENGTH),
        short_name_max_distance=env_int(
            "PARTNERLINK_MATCH_SHORT_NAME_MAX_DISTANCE", DEFAULT_SHORT_NAME_MAX_DISTANCE
        ),
        long_name_max_distance=env_int(
            "PARTNERLINK_MATCH_LONG_NAME_MAX_DISTANCE", DEFAULT_LONG_NAME_MAX_DISTANCE
        ),
    )
