"""Correlation candidates between a trip and a payment record."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from tripmatch.domain.errors import InvalidStateError, ValidationError
from tripmatch.domain.model.base import Entity, utcnow
from tripmatch.domain.model.enums import (
    CorrelationState,
    QualityFlag,
    QualityTier,
    SignalKind,
)

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime


@dataclass(frozen=True, slots=True, kw_only=True)
class SignalScore:
    """Outcome of one signal scorer.

    ``raw_metric`` is the underlying measurement (similarity ratio, distance in
    kilometres, day gap) and ``detail`` names the comparison that produced it, so
    stored scores stay interpretable after the algorithm changes.
    """

    signal_kind: SignalKind
    contribution: int = 0
    used: bool = False
    raw_metric: float | None = None
    detail: str | None = None

    def __post_init__(self) -> None:
        if not 0 <= self.contribution <= 100:
            raise ValidationError(
                f"{self.signal_kind} contribution must be within [0, 100], got {self.contribution}"
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "signal_kind": str(self.signal_kind),
            "contribution": self.contribution,
            "used": self.used,
            "raw_metric": self.raw_metric,
            "detail": self.detail,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SignalScore:
        return cls(
            signal_kind=SignalKind(data["signal_kind"]),
            contribution=int(data.get("contribution", 0)),
            used=bool(data.get("used", False)),
            raw_metric=data.get("raw_metric"),
            detail=data.get("detail"),
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class CorrelationAssessment:
    """Everything the scorers and the fusion engine derived for one candidate pair."""

    signal_scores: tuple[SignalScore, ...]
    confidence_score: int
    quality_flags: frozenset[QualityFlag]
    requires_manual_review: bool
    business_identifier_match: bool = False
    location_reference_match: bool = False
    within_service_area: bool = False
    terminal_distance_km: float | None = None
    date_difference_days: int | None = None
    customer_name: str | None = None
    terminal_name: str | None = None
    carrier: str | None = None

    @property
    def quality_tier(self) -> QualityTier:
        return QualityTier.for_score(self.confidence_score)


@dataclass(eq=False, kw_only=True)
class Correlation(Entity):
    """One candidate link between a trip and a payment record.

    Scoring fields are written only through :meth:`apply_assessment`; the review
    fields only through :meth:`verify` and :meth:`reject`.
    """

    trip_id: str
    payment_key: str
    algorithm_version: str
    signal_scores: list[SignalScore] = field(default_factory=list)
    confidence_score: int = 0
    _quality_tier: QualityTier = QualityTier.POOR
    quality_flags: frozenset[QualityFlag] = frozenset()
    business_identifier_match: bool = False
    location_reference_match: bool = False
    within_service_area: bool = False
    terminal_distance_km: float | None = None
    date_difference_days: int | None = None
    requires_manual_review: bool = True
    customer_name: str | None = None
    terminal_name: str | None = None
    carrier: str | None = None
    verified_by_user: bool = False
    is_active_match: bool = True
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    rejection_reason: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if not self.trip_id or not self.trip_id.strip():
            raise ValidationError("correlation trip_id is required")
        if not self.payment_key or not self.payment_key.strip():
            raise ValidationError("correlation payment_key is required")
        if not self.algorithm_version:
            raise ValidationError("correlation algorithm_version is required")

    @classmethod
    def propose(
        cls,
        *,
        trip_id: str,
        payment_key: str,
        algorithm_version: str,
        assessment: CorrelationAssessment,
    ) -> Correlation:
        correlation = cls(
            trip_id=trip_id,
            payment_key=payment_key,
            algorithm_version=algorithm_version,
        )
        correlation._apply(assessment)
        return correlation

    @property
    def quality_tier(self) -> QualityTier:
        return self._quality_tier

    @property
    def state(self) -> CorrelationState:
        if not self.is_active_match:
            return CorrelationState.REJECTED
        if self.verified_by_user:
            return CorrelationState.VERIFIED
        return CorrelationState.PROPOSED

    @property
    def is_proposed(self) -> bool:
        return self.state is CorrelationState.PROPOSED

    def signal(self, kind: SignalKind) -> SignalScore | None:
        for score in self.signal_scores:
            if score.signal_kind is kind:
                return score
        return None

    @property
    def used_signals(self) -> tuple[SignalKind, ...]:
        return tuple(score.signal_kind for score in self.signal_scores if score.used)

    def apply_assessment(
        self, assessment: CorrelationAssessment, *, at: datetime | None = None
    ) -> None:
        """Re-fuse a proposed correlation in place.

        ``updated_at`` moves only when a scoring field actually changed.
        """
        self._require_proposed("re-fuse")
        before = self._scoring_state()
        self._apply(assessment)
        if self._scoring_state() != before:
            self.updated_at = at or utcnow()

    def verify(self, actor_id: str, *, at: datetime | None = None) -> None:
        self._require_proposed("verify")
        self.verified_by_user = True
        self._mark_reviewed(actor_id, at)

    def reject(
        self, actor_id: str, reason: str | None = None, *, at: datetime | None = None
    ) -> None:
        self._require_proposed("reject")
        self.is_active_match = False
        self.rejection_reason = reason or None
        self._mark_reviewed(actor_id, at)

    def _apply(self, assessment: CorrelationAssessment) -> None:
        self.signal_scores = list(assessment.signal_scores)
        self.confidence_score = assessment.confidence_score
        self._quality_tier = QualityTier.for_score(assessment.confidence_score)
        self.quality_flags = frozenset(assessment.quality_flags)
        self.requires_manual_review = assessment.requires_manual_review
        self.business_identifier_match = assessment.business_identifier_match
        self.location_reference_match = assessment.location_reference_match
        self.within_service_area = assessment.within_service_area
        self.terminal_distance_km = assessment.terminal_distance_km
        self.date_difference_days = assessment.date_difference_days
        self.customer_name = assessment.customer_name
        self.terminal_name = assessment.terminal_name
        self.carrier = assessment.carrier

    def _scoring_state(self) -> tuple[object, ...]:
        return (
            tuple(self.signal_scores),
            self.confidence_score,
            self._quality_tier,
            self.quality_flags,
            self.requires_manual_review,
            self.business_identifier_match,
            self.location_reference_match,
            self.within_service_area,
            self.terminal_distance_km,
            self.date_difference_days,
            self.customer_name,
            self.terminal_name,
            self.carrier,
        )

    def _mark_reviewed(self, actor_id: str, at: datetime | None) -> None:
        if not actor_id or not actor_id.strip():
            raise ValidationError("actor_id is required for review actions")
        now = at or utcnow()
        self.reviewed_by = actor_id
        self.reviewed_at = now
        self.updated_at = now

    def _require_proposed(self, action: str) -> None:
        state = self.state
        if state is not CorrelationState.PROPOSED:
            raise InvalidStateError(
                f"cannot {action} correlation {self.id}: it is {state}, not proposed"
            )

