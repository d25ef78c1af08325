"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum
from typing import Final

EXCELLENT_BOUNDARY: Final[int] = 90
GOOD_BOUNDARY: Final[int] = 75
FAIR_BOUNDARY: Final[int] = 60


class EntityKind(StrEnum):
    """Kinds of named entity carried by the alias catalog."""

    BUSINESS = "business"
    LOCATION = "location"
    TERMINAL = "terminal"


class MatchType(StrEnum):
    EXACT = "exact"
    FUZZY = "fuzzy"
    NONE = "none"


class SignalKind(StrEnum):
    TEXT = "text"
    GEOSPATIAL = "geospatial"
    TEMPORAL = "temporal"


class QualityTier(StrEnum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"

    @classmethod
    def for_score(cls, score: int) -> QualityTier:
        """Classify a fused score; each boundary belongs to the higher tier."""

        if score >= EXCELLENT_BOUNDARY:
            return cls.EXCELLENT
        if score >= GOOD_BOUNDARY:
            return cls.GOOD
        if score >= FAIR_BOUNDARY:
            return cls.FAIR
        return cls.POOR


class QualityFlag(StrEnum):
    LOW_CONFIDENCE = "low_confidence"
    LARGE_DATE_GAP = "large_date_gap"
    LONG_DISTANCE = "long_distance"
    NO_LOCATION_MATCH = "no_location_match"


class CorrelationState(StrEnum):
    PROPOSED = "proposed"
    VERIFIED = "verified"
    REJECTED = "rejected"


class AuditAction(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    VERIFIED = "verified"
    REJECTED = "rejected"
    DELETED = "deleted"
