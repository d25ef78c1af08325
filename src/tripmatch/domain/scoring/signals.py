"""Independent signal scorers.

Every scorer is a pure function of the two records (plus resolved names for the
text signal) and returns a :class:`SignalScore` even when data is missing; an
inapplicable signal is reported with ``used=False`` rather than raised.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from tripmatch.domain.model.correlation import SignalScore
from tripmatch.domain.model.enums import EntityKind, SignalKind
from tripmatch.domain.resolution.normalize import name_tokens, normalize_name

if TYPE_CHECKING:
    from collections.abc import Sequence

    from tripmatch.config.matching import MatchingConfig
    from tripmatch.domain.model.records import GeoPoint, PaymentRecord, TripRecord
    from tripmatch.domain.resolution.resolver import NameResolver, ResolutionResult

EARTH_RADIUS_KM: Final[float] = 6371.0


def haversine_km(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance between two WGS84 points."""
    lat1, lon1 = math.radians(a.latitude), math.radians(a.longitude)
    lat2, lon2 = math.radians(b.latitude), math.radians(b.longitude)
    h = (
        math.sin((lat2 - lat1) / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin((lon2 - lon1) / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(h)))


def band_points[T: (int, float)](value: T, bands: Sequence[tuple[T, int]]) -> int:
    """Points of the first band whose inclusive upper bound covers ``value``."""
    for bound, points in bands:
        if value <= bound:
            return points
    return 0


# -- text ----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TextSignal:
    score: SignalScore
    business_identifier_match: bool = False
    location_reference_match: bool = False


@dataclass(frozen=True, slots=True)
class _TextCandidate:
    contribution: int
    ratio: float
    detail: str
    business: bool = False
    location: bool = False


def score_text(
    trip: TripRecord,
    payment: PaymentRecord,
    resolver: NameResolver,
    config: MatchingConfig,
) -> TextSignal:
    """Compare trip locations with the payment's customer and terminal.

    Each trip location is resolved as a business and a location against the
    customer name, and as a terminal against the terminal name. A shared
    canonical id earns the full weight, a shared identity-bearing token the
    partial weight. The best pair wins; earlier pairs win ties.
    """
    trip_names = trip.location_names
    payment_names = [
        (kinds, name)
        for kinds, name in (
            ((EntityKind.BUSINESS, EntityKind.LOCATION), payment.customer_name),
            ((EntityKind.TERMINAL,), payment.terminal_name),
        )
        if name and name.strip()
    ]
    if not trip_names or not payment_names:
        return TextSignal(score=SignalScore(signal_kind=SignalKind.TEXT))

    candidates = [
        _compare_names(
            resolver.resolve(trip_name, kind),
            resolver.resolve(payment_name, kind),
            kind,
            position,
            config,
        )
        for position, trip_name in trip_names
        for kinds, payment_name in payment_names
        for kind in kinds
    ]
    best = max(candidates, key=lambda candidate: candidate.contribution)

    return TextSignal(
        score=SignalScore(
            signal_kind=SignalKind.TEXT,
            contribution=best.contribution,
            used=True,
            raw_metric=round(best.ratio, 4),
            detail=best.detail,
        ),
        business_identifier_match=best.business,
        location_reference_match=best.location,
    )


def _compare_names(
    trip_side: ResolutionResult,
    payment_side: ResolutionResult,
    kind: EntityKind,
    position: str,
    config: MatchingConfig,
) -> _TextCandidate:
    if trip_side.is_match and trip_side.resolved_canonical_id == payment_side.resolved_canonical_id:
        return _TextCandidate(
            contribution=config.text_full_weight,
            ratio=1.0,
            detail=f"{kind}_canonical_{position}",
            business=kind is EntityKind.BUSINESS,
            location=kind is not EntityKind.BUSINESS,
        )
    if trip_side.canonical_value == payment_side.canonical_value:
        return _TextCandidate(
            contribution=config.text_full_weight,
            ratio=1.0,
            detail=f"{kind}_name_{position}",
            business=kind is EntityKind.BUSINESS,
            location=kind is not EntityKind.BUSINESS,
        )

    trip_tokens = name_tokens(trip_side.canonical_value) | name_tokens(trip_side.input_text)
    payment_tokens = name_tokens(payment_side.canonical_value) | name_tokens(
        payment_side.input_text
    )
    shared = trip_tokens & payment_tokens
    if shared:
        return _TextCandidate(
            contribution=config.text_partial_weight,
            ratio=len(shared) / len(trip_tokens | payment_tokens),
            detail=f"{kind}_partial_{position}",
        )
    return _TextCandidate(contribution=0, ratio=0.0, detail="no_overlap")


# -- geospatial ----------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class GeoSignal:
    score: SignalScore
    distance_km: float | None = None
    within_service_area: bool = False


def score_geospatial(
    trip: TripRecord, payment: PaymentRecord, config: MatchingConfig
) -> GeoSignal:
    """Score the trip point nearest to the delivery point."""
    delivery = payment.delivery_point
    points = trip.points
    if delivery is None or not points:
        return GeoSignal(score=SignalScore(signal_kind=SignalKind.GEOSPATIAL))

    distance, position = min(
        (haversine_km(point, delivery), position) for position, point in points
    )
    distance = round(distance, 3)
    return GeoSignal(
        score=SignalScore(
            signal_kind=SignalKind.GEOSPATIAL,
            contribution=band_points(distance, config.geo_bands),
            used=True,
            raw_metric=distance,
            detail=f"nearest_trip_{position}",
        ),
        distance_km=distance,
        within_service_area=distance <= config.service_radius_km,
    )


# -- temporal ------------------------------------------------------------------------


def score_temporal(
    trip: TripRecord, payment: PaymentRecord, config: MatchingConfig
) -> SignalScore:
    if trip.trip_date is None or payment.delivery_date is None:
        return SignalScore(signal_kind=SignalKind.TEMPORAL)
    gap = abs((payment.delivery_date - trip.trip_date).days)
    return SignalScore(
        signal_kind=SignalKind.TEMPORAL,
        contribution=band_points(gap, config.temporal_bands),
        used=True,
        raw_metric=float(gap),
        detail="same_day" if gap == 0 else f"{gap}_day_gap",
    )
