"""Fusion of signal contributions into one confidence score."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from tripmatch.domain.errors import ValidationError
from tripmatch.domain.model.enums import FAIR_BOUNDARY, QualityFlag, QualityTier, SignalKind

if TYPE_CHECKING:
    from collections.abc import Iterable

    from tripmatch.config.matching import MatchingConfig
    from tripmatch.domain.model.correlation import SignalScore

MAX_CONFIDENCE = 100


@dataclass(frozen=True, slots=True)
class FusionResult:
    confidence_score: int
    quality_tier: QualityTier
    quality_flags: frozenset[QualityFlag]
    requires_manual_review: bool


def fuse(signal_scores: Iterable[SignalScore], config: MatchingConfig) -> FusionResult:
    """Combine signal scores.

    The score is the clamped sum of used contributions; unused signals are
    neutral and the sum is not normalised by the number of signals used. Flags
    come from each signal's own threshold and are only raised when at least one
    signal was used.
    """
    scores = list(signal_scores)
    kinds = [score.signal_kind for score in scores]
    if len(kinds) != len(set(kinds)):
        raise ValidationError(f"duplicate signal kinds in {kinds}")

    used = [score for score in scores if score.used]
    confidence = max(0, min(MAX_CONFIDENCE, sum(score.contribution for score in used)))
    tier = QualityTier.for_score(confidence)
    flags = _flags(used, confidence, config) if used else frozenset()
    requires_review = tier in {QualityTier.FAIR, QualityTier.POOR} or bool(
        flags & config.always_review_flags
    )
    return FusionResult(
        confidence_score=confidence,
        quality_tier=tier,
        quality_flags=flags,
        requires_manual_review=requires_review,
    )


def _flags(
    used: list[SignalScore], confidence: int, config: MatchingConfig
) -> frozenset[QualityFlag]:
    flags: set[QualityFlag] = set()
    for score in used:
        match score.signal_kind:
            case SignalKind.GEOSPATIAL:
                if score.raw_metric is not None and score.raw_metric > config.long_distance_km:
                    flags.add(QualityFlag.LONG_DISTANCE)
            case SignalKind.TEMPORAL:
                if score.raw_metric is not None and score.raw_metric > config.large_gap_days:
                    flags.add(QualityFlag.LARGE_DATE_GAP)
    location = [
        score for score in used if score.signal_kind in {SignalKind.TEXT, SignalKind.GEOSPATIAL}
    ]
    # names and coordinates were compared and neither earned a point
    if location and all(score.contribution == 0 for score in location):
        flags.add(QualityFlag.NO_LOCATION_MATCH)
    if confidence < FAIR_BOUNDARY:
        flags.add(QualityFlag.LOW_CONFIDENCE)
    return frozenset(flags)
