"""Tunable weights and thresholds for resolution, scoring and fusion."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from tripmatch.domain.model.enums import EntityKind, QualityFlag

from .env import optional_env_float, optional_env_int, optional_env_str
from .errors import ConfigurationError

DEFAULT_ALGORITHM_VERSION: Final[str] = "fusion-v1"

# (upper bound inclusive, points) pairs, checked in order
DEFAULT_GEO_BANDS: Final[tuple[tuple[float, int], ...]] = (
    (15.0, 35),
    (25.0, 30),
    (50.0, 25),
    (100.0, 15),
)
DEFAULT_TEMPORAL_BANDS: Final[tuple[tuple[int, int], ...]] = (
    (0, 25),
    (1, 20),
    (2, 15),
    (3, 10),
)
DEFAULT_CONFIDENCE_BOOSTS: Final[tuple[tuple[EntityKind, int], ...]] = (
    (EntityKind.BUSINESS, 10),
    (EntityKind.LOCATION, 10),
    (EntityKind.TERMINAL, 15),
)


@dataclass(frozen=True, slots=True)
class MatchingConfig:
    """Every knob the engine reads; one instance maps to one ``algorithm_version``."""

    algorithm_version: str = DEFAULT_ALGORITHM_VERSION
    fuzzy_threshold: float = 0.7
    default_confidence_boosts: tuple[tuple[EntityKind, int], ...] = DEFAULT_CONFIDENCE_BOOSTS
    text_full_weight: int = 40
    text_partial_weight: int = 20
    geo_bands: tuple[tuple[float, int], ...] = DEFAULT_GEO_BANDS
    service_radius_km: float = 15.0
    long_distance_km: float = 100.0
    temporal_bands: tuple[tuple[int, int], ...] = DEFAULT_TEMPORAL_BANDS
    large_gap_days: int = 3
    candidate_window_days: int = 3
    always_review_flags: frozenset[QualityFlag] = frozenset(
        {QualityFlag.LONG_DISTANCE, QualityFlag.LARGE_DATE_GAP}
    )

    def __post_init__(self) -> None:
        if not self.algorithm_version.strip():
            raise ConfigurationError("algorithm_version must not be blank")
        if not 0.0 <= self.fuzzy_threshold < 1.0:
            raise ConfigurationError("fuzzy_threshold must be within [0, 1)")
        if self.text_partial_weight > self.text_full_weight:
            raise ConfigurationError("text_partial_weight cannot exceed text_full_weight")
        _check_bands("geo_bands", self.geo_bands)
        _check_bands("temporal_bands", self.temporal_bands)
        missing = set(EntityKind) - {kind for kind, _boost in self.default_confidence_boosts}
        if missing:
            raise ConfigurationError(
                f"default_confidence_boosts lacks {sorted(str(kind) for kind in missing)}"
            )
        if self.candidate_window_days < 0:
            raise ConfigurationError("candidate_window_days must be non-negative")

    def default_boost(self, kind: EntityKind) -> int:
        return dict(self.default_confidence_boosts)[kind]


def _check_bands(
    name: str, bands: tuple[tuple[float, int], ...] | tuple[tuple[int, int], ...]
) -> None:
    bounds = [bound for bound, _points in bands]
    if bounds != sorted(bounds):
        raise ConfigurationError(f"{name} bounds must be ascending")
    if any(points < 0 for _bound, points in bands):
        raise ConfigurationError(f"{name} points must be non-negative")


def get_matching_config() -> MatchingConfig:
    """Build the matching configuration, applying ``TRIPMATCH_*`` overrides."""

    return MatchingConfig(
        algorithm_version=optional_env_str(
            "TRIPMATCH_ALGORITHM_VERSION", DEFAULT_ALGORITHM_VERSION
        ),
        fuzzy_threshold=optional_env_float("TRIPMATCH_FUZZY_THRESHOLD", 0.7),
        service_radius_km=optional_env_float("TRIPMATCH_SERVICE_RADIUS_KM", 15.0),
        long_distance_km=optional_env_float("TRIPMATCH_LONG_DISTANCE_KM", 100.0),
        large_gap_days=optional_env_int("TRIPMATCH_LARGE_GAP_DAYS", 3),
        candidate_window_days=optional_env_int("TRIPMATCH_CANDIDATE_WINDOW_DAYS", 3),
    )
