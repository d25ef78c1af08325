"""Signal scorers and the fusion engine."""

from tripmatch.domain.scoring.assessment import assess
from tripmatch.domain.scoring.fusion import FusionResult, fuse
from tripmatch.domain.scoring.signals import (
    GeoSignal,
    TextSignal,
    haversine_km,
    score_geospatial,
    score_temporal,
    score_text,
)

__all__ = [
    "FusionResult",
    "GeoSignal",
    "TextSignal",
    "assess",
    "fuse",
    "haversine_km",
    "score_geospatial",
    "score_temporal",
    "score_text",
]
