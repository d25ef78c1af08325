"""Domain model for trip/payment correlation."""

from __future__ import annotations

from tripmatch.domain.model.alias import (
    MAX_CONFIDENCE_BOOST,
    MIN_CONFIDENCE_BOOST,
    AliasEntry,
)
from tripmatch.domain.model.audit import AuditEntry
from tripmatch.domain.model.base import Entity, new_id, utcnow
from tripmatch.domain.model.correlation import (
    Correlation,
    CorrelationAssessment,
    SignalScore,
)
from tripmatch.domain.model.enums import (
    EXCELLENT_BOUNDARY,
    FAIR_BOUNDARY,
    GOOD_BOUNDARY,
    AuditAction,
    CorrelationState,
    EntityKind,
    MatchType,
    QualityFlag,
    QualityTier,
    SignalKind,
)
from tripmatch.domain.model.records import GeoPoint, PaymentRecord, TripRecord

__all__ = [
    "EXCELLENT_BOUNDARY",
    "FAIR_BOUNDARY",
    "GOOD_BOUNDARY",
    "MAX_CONFIDENCE_BOOST",
    "MIN_CONFIDENCE_BOOST",
    "AliasEntry",
    "AuditAction",
    "AuditEntry",
    "Correlation",
    "CorrelationAssessment",
    "CorrelationState",
    "Entity",
    "EntityKind",
    "GeoPoint",
    "MatchType",
    "PaymentRecord",
    "QualityFlag",
    "QualityTier",
    "SignalKind",
    "SignalScore",
    "TripRecord",
    "new_id",
    "utcnow",
]
