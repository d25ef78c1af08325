"""JSON file adapter for trips, payments and alias lists."""

from __future__ import annotations

from .loader import (
    load_aliases,
    load_payments,
    load_trip,
    parse_aliases,
    parse_payments,
    parse_trip,
)

__all__ = [
    "load_aliases",
    "load_payments",
    "load_trip",
    "parse_aliases",
    "parse_payments",
    "parse_trip",
]
