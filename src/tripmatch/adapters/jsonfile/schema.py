"""Schemas for trip, payment and alias JSON files."""

from __future__ import annotations

import logging
from datetime import date  # noqa: TC003
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

from tripmatch.domain.model.enums import EntityKind  # noqa: TC001

log = logging.getLogger(__name__)


class FileBaseModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)
    _logged_extra_keys: ClassVar[set[str]] = set()

    def model_post_init(self, _context: object, /) -> None:
        extras = self.__pydantic_extra__
        if not extras:
            return
        new_keys = set(extras).difference(self._logged_extra_keys)
        if not new_keys:
            return
        self._logged_extra_keys.update(new_keys)
        log.warning(
            "%s: ignoring unmodeled keys: %s",
            type(self).__name__,
            ", ".join(sorted(new_keys)),
        )


class GeoPointPayload(FileBaseModel):
    latitude: float = Field(ge=-90.0, le=90.0, alias="lat")
    longitude: float = Field(ge=-180.0, le=180.0, alias="lon")


class TripPayload(FileBaseModel):
    trip_id: str = Field(min_length=1)
    trip_date: date | None = None
    start_location: str | None = None
    end_location: str | None = None
    start_point: GeoPointPayload | None = None
    end_point: GeoPointPayload | None = None
    vehicle_registration: str | None = None
    fleet: str | None = None


class PaymentPayload(FileBaseModel):
    """A captive payment line.

    ``payment_key`` may be omitted, in which case it is composed from the bill of
    lading, delivery date and customer.
    """

    payment_key: str | None = None
    bill_of_lading: str | None = None
    delivery_date: date | None = None
    customer_name: str | None = Field(default=None, alias="customer")
    terminal_name: str | None = Field(default=None, alias="terminal")
    carrier: str | None = None
    delivery_point: GeoPointPayload | None = None
    volume_litres: float | None = Field(default=None, ge=0.0)


class PaymentFile(FileBaseModel):
    payments: list[PaymentPayload]


class AliasPayload(FileBaseModel):
    kind: EntityKind
    canonical_id: str = Field(min_length=1)
    alias_text: str = Field(min_length=1, alias="alias")
    alias_kind: str | None = None
    confidence_boost: int | None = Field(default=None, ge=0, le=100)
    exact_match_required: bool = False
    notes: str | None = None


class AliasFile(FileBaseModel):
    aliases: list[AliasPayload]
