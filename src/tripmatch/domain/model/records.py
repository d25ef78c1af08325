"""Trip and payment records as seen by the correlation engine.

Both sides arrive fully materialised; the engine never fetches anything.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from tripmatch.domain.errors import ValidationError

if TYPE_CHECKING:
    from datetime import date


@dataclass(frozen=True, slots=True)
class GeoPoint:
    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude <= 90.0:
            raise ValidationError(f"latitude out of range: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValidationError(f"longitude out of range: {self.longitude}")


@dataclass(frozen=True, slots=True, kw_only=True)
class TripRecord:
    """A vehicle trip reported by the telematics side."""

    trip_id: str
    trip_date: date | None = None
    start_location: str | None = None
    end_location: str | None = None
    start_point: GeoPoint | None = None
    end_point: GeoPoint | None = None
    vehicle_registration: str | None = None
    fleet: str | None = None

    def __post_init__(self) -> None:
        if not self.trip_id or not self.trip_id.strip():
            raise ValidationError("trip_id is required")

    @property
    def location_names(self) -> tuple[tuple[str, str], ...]:
        """Non-blank ``(position, name)`` pairs, start before end."""
        names: list[tuple[str, str]] = []
        for position, name in (("start", self.start_location), ("end", self.end_location)):
            if name and name.strip():
                names.append((position, name))
        return tuple(names)

    @property
    def points(self) -> tuple[tuple[str, GeoPoint], ...]:
        points: list[tuple[str, GeoPoint]] = []
        for position, point in (("start", self.start_point), ("end", self.end_point)):
            if point is not None:
                points.append((position, point))
        return tuple(points)


@dataclass(frozen=True, slots=True, kw_only=True)
class PaymentRecord:
    """A fuel-delivery payment line, keyed by its composite natural key."""

    payment_key: str
    delivery_date: date | None = None
    customer_name: str | None = None
    terminal_name: str | None = None
    carrier: str | None = None
    delivery_point: GeoPoint | None = None
    volume_litres: float | None = None

    def __post_init__(self) -> None:
        if not self.payment_key or not self.payment_key.strip():
            raise ValidationError("payment_key is required")
        if self.volume_litres is not None and self.volume_litres < 0:
            raise ValidationError("volume_litres must be non-negative")
