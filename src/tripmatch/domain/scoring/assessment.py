"""Run every scorer over a candidate pair and fuse the result."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from tripmatch.domain.model.correlation import CorrelationAssessment
from tripmatch.domain.scoring.fusion import fuse
from tripmatch.domain.scoring.signals import score_geospatial, score_temporal, score_text

if TYPE_CHECKING:
    from tripmatch.config.matching import MatchingConfig
    from tripmatch.domain.model.records import PaymentRecord, TripRecord
    from tripmatch.domain.resolution.resolver import NameResolver

log = getLogger(__name__)


def assess(
    trip: TripRecord,
    payment: PaymentRecord,
    resolver: NameResolver,
    config: MatchingConfig,
) -> CorrelationAssessment:
    text = score_text(trip, payment, resolver, config)
    geo = score_geospatial(trip, payment, config)
    temporal = score_temporal(trip, payment, config)

    signal_scores = (text.score, geo.score, temporal)
    fusion = fuse(signal_scores, config)
    log.debug(
        "Assessed trip %s / payment %s: %d (%s)",
        trip.trip_id,
        payment.payment_key,
        fusion.confidence_score,
        fusion.quality_tier,
    )
    return CorrelationAssessment(
        signal_scores=signal_scores,
        confidence_score=fusion.confidence_score,
        quality_flags=fusion.quality_flags,
        requires_manual_review=fusion.requires_manual_review,
        business_identifier_match=text.business_identifier_match,
        location_reference_match=text.location_reference_match,
        within_service_area=geo.within_service_area,
        terminal_distance_km=geo.distance_km,
        date_difference_days=(
            int(temporal.raw_metric) if temporal.used and temporal.raw_metric is not None else None
        ),
        customer_name=payment.customer_name,
        terminal_name=payment.terminal_name,
        carrier=payment.carrier,
    )
