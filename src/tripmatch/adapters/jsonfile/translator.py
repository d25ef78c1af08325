"""Translate file payloads into domain records."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tripmatch.domain.errors import ValidationError
from tripmatch.domain.model import AliasEntry, GeoPoint, PaymentRecord, TripRecord

if TYPE_CHECKING:
    from tripmatch.config.matching import MatchingConfig

    from .schema import AliasPayload, GeoPointPayload, PaymentPayload, TripPayload


def _point(payload: GeoPointPayload | None) -> GeoPoint | None:
    if payload is None:
        return None
    return GeoPoint(latitude=payload.latitude, longitude=payload.longitude)


def payment_key_for(payload: PaymentPayload) -> str:
    """Explicit key, or ``bill_of_lading|delivery_date|customer``."""
    if payload.payment_key:
        return payload.payment_key
    if not payload.bill_of_lading:
        raise ValidationError("payment needs either payment_key or bill_of_lading")
    parts = (
        payload.bill_of_lading,
        payload.delivery_date.isoformat() if payload.delivery_date else "",
        (payload.customer_name or "").strip().upper(),
    )
    return "|".join(parts)


def translate_trip(payload: TripPayload) -> TripRecord:
    return TripRecord(
        trip_id=payload.trip_id,
        trip_date=payload.trip_date,
        start_location=payload.start_location,
        end_location=payload.end_location,
        start_point=_point(payload.start_point),
        end_point=_point(payload.end_point),
        vehicle_registration=payload.vehicle_registration,
        fleet=payload.fleet,
    )


def translate_payment(payload: PaymentPayload) -> PaymentRecord:
    return PaymentRecord(
        payment_key=payment_key_for(payload),
        delivery_date=payload.delivery_date,
        customer_name=payload.customer_name,
        terminal_name=payload.terminal_name,
        carrier=payload.carrier,
        delivery_point=_point(payload.delivery_point),
        volume_litres=payload.volume_litres,
    )


def translate_alias(payload: AliasPayload, config: MatchingConfig) -> AliasEntry:
    boost = payload.confidence_boost
    return AliasEntry(
        entity_kind=payload.kind,
        canonical_id=payload.canonical_id.strip(),
        alias_text=payload.alias_text.strip(),
        alias_kind=payload.alias_kind,
        confidence_boost=config.default_boost(payload.kind) if boost is None else boost,
        exact_match_required=payload.exact_match_required,
        notes=payload.notes,
    )
