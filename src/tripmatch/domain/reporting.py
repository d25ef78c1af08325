"""Read-only quality aggregations over correlations and the audit log.

Only active matches feed the correlation reports; rejected candidates are left
out. Every function takes already-loaded records so the same code serves the
CLI, tests and any other reader.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from datetime import timedelta
from statistics import fmean, pstdev
from typing import TYPE_CHECKING, Final

from tripmatch.domain.model.enums import AuditAction, QualityFlag, QualityTier, SignalKind

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from datetime import date, datetime

    from tripmatch.domain.model import AuditEntry, Correlation

HIGH_CONFIDENCE_THRESHOLD: Final[int] = 80


def _pct(part: int, whole: int) -> float:
    return round(100.0 * part / whole, 2) if whole else 0.0


def _avg(values: Sequence[float]) -> float | None:
    return round(fmean(values), 2) if values else None


def _active(correlations: Iterable[Correlation], since: datetime | None) -> list[Correlation]:
    return [
        correlation
        for correlation in correlations
        if correlation.is_active_match and (since is None or correlation.created_at >= since)
    ]


def _contributions(correlations: Iterable[Correlation], kind: SignalKind) -> list[float]:
    values: list[float] = []
    for correlation in correlations:
        score = correlation.signal(kind)
        if score is not None and score.used:
            values.append(float(score.contribution))
    return values


def _uses(correlation: Correlation, kind: SignalKind) -> bool:
    return kind in correlation.used_signals


@dataclass(slots=True)
class QualityDashboard:
    total: int
    tier_counts: dict[QualityTier, int]
    tier_percentages: dict[QualityTier, float]
    high_quality_rate: float
    text_used: int
    geospatial_used: int
    temporal_used: int
    multi_method: int
    business_identifier_matches: int
    location_reference_matches: int
    within_service_area: int
    flag_counts: dict[QualityFlag, int]
    verified: int
    verification_rate: float
    manual_review: int
    manual_review_rate: float
    average_confidence: float | None
    average_contribution: dict[SignalKind, float | None] = field(default_factory=dict)


def build_quality_dashboard(
    correlations: Iterable[Correlation], *, since: datetime | None = None
) -> QualityDashboard:
    rows = _active(correlations, since)
    total = len(rows)
    tiers = Counter(row.quality_tier for row in rows)
    flags: Counter[QualityFlag] = Counter()
    for row in rows:
        flags.update(row.quality_flags)
    verified = sum(1 for row in rows if row.verified_by_user)
    review = sum(1 for row in rows if row.requires_manual_review)

    return QualityDashboard(
        total=total,
        tier_counts={tier: tiers.get(tier, 0) for tier in QualityTier},
        tier_percentages={tier: _pct(tiers.get(tier, 0), total) for tier in QualityTier},
        high_quality_rate=_pct(tiers[QualityTier.EXCELLENT] + tiers[QualityTier.GOOD], total),
        text_used=sum(1 for row in rows if _uses(row, SignalKind.TEXT)),
        geospatial_used=sum(1 for row in rows if _uses(row, SignalKind.GEOSPATIAL)),
        temporal_used=sum(1 for row in rows if _uses(row, SignalKind.TEMPORAL)),
        multi_method=sum(1 for row in rows if len(row.used_signals) > 1),
        business_identifier_matches=sum(1 for row in rows if row.business_identifier_match),
        location_reference_matches=sum(1 for row in rows if row.location_reference_match),
        within_service_area=sum(1 for row in rows if row.within_service_area),
        flag_counts={flag: flags.get(flag, 0) for flag in QualityFlag},
        verified=verified,
        verification_rate=_pct(verified, total),
        manual_review=review,
        manual_review_rate=_pct(review, total),
        average_confidence=_avg([float(row.confidence_score) for row in rows]),
        average_contribution={kind: _avg(_contributions(rows, kind)) for kind in SignalKind},
    )


@dataclass(slots=True)
class AlgorithmPerformance:
    algorithm_version: str
    total: int
    tier_counts: dict[QualityTier, int]
    min_confidence: int
    max_confidence: int
    average_confidence: float
    confidence_stddev: float
    manual_review: int
    verified: int


def algorithm_performance(
    correlations: Iterable[Correlation], *, since: datetime | None = None
) -> list[AlgorithmPerformance]:
    """Per ``algorithm_version`` statistics, sorted by version."""

    grouped: dict[str, list[Correlation]] = defaultdict(list)
    for row in _active(correlations, since):
        grouped[row.algorithm_version].append(row)

    report: list[AlgorithmPerformance] = []
    for version in sorted(grouped):
        rows = grouped[version]
        scores = [row.confidence_score for row in rows]
        tiers = Counter(row.quality_tier for row in rows)
        report.append(
            AlgorithmPerformance(
                algorithm_version=version,
                total=len(rows),
                tier_counts={tier: tiers.get(tier, 0) for tier in QualityTier},
                min_confidence=min(scores),
                max_confidence=max(scores),
                average_confidence=round(fmean(scores), 2),
                confidence_stddev=round(pstdev(scores), 2),
                manual_review=sum(1 for row in rows if row.requires_manual_review),
                verified=sum(1 for row in rows if row.verified_by_user),
            )
        )
    return report


@dataclass(slots=True)
class TerminalPerformance:
    terminal_name: str | None
    carrier: str | None
    total: int
    average_confidence: float
    text_rate: float
    geospatial_rate: float
    temporal_rate: float
    average_distance_km: float | None
    min_distance_km: float | None
    max_distance_km: float | None
    manual_review: int


def terminal_performance(
    correlations: Iterable[Correlation], *, since: datetime | None = None
) -> list[TerminalPerformance]:
    """Per (terminal, carrier) statistics, busiest first."""

    grouped: dict[tuple[str | None, str | None], list[Correlation]] = defaultdict(list)
    for row in _active(correlations, since):
        grouped[(row.terminal_name, row.carrier)].append(row)

    report: list[TerminalPerformance] = []
    for (terminal, carrier), rows in grouped.items():
        total = len(rows)
        distances = [
            row.terminal_distance_km for row in rows if row.terminal_distance_km is not None
        ]
        report.append(
            TerminalPerformance(
                terminal_name=terminal,
                carrier=carrier,
                total=total,
                average_confidence=round(fmean(row.confidence_score for row in rows), 2),
                text_rate=_pct(sum(1 for row in rows if _uses(row, SignalKind.TEXT)), total),
                geospatial_rate=_pct(
                    sum(1 for row in rows if _uses(row, SignalKind.GEOSPATIAL)), total
                ),
                temporal_rate=_pct(
                    sum(1 for row in rows if _uses(row, SignalKind.TEMPORAL)), total
                ),
                average_distance_km=_avg(distances),
                min_distance_km=min(distances) if distances else None,
                max_distance_km=max(distances) if distances else None,
                manual_review=sum(1 for row in rows if row.requires_manual_review),
            )
        )
    report.sort(key=lambda item: (-item.total, item.terminal_name or "", item.carrier or ""))
    return report


@dataclass(slots=True)
class QualityTrend:
    week_start: date
    algorithm_version: str
    total: int
    average_confidence: float
    high_confidence_rate: float


def week_start(moment: datetime) -> date:
    """Monday of the ISO week containing ``moment``."""
    day = moment.date()
    return day - timedelta(days=day.weekday())


def quality_trends(
    correlations: Iterable[Correlation], *, since: datetime | None = None
) -> list[QualityTrend]:
    """Weekly buckets per algorithm version, newest week first."""

    grouped: dict[tuple[date, str], list[int]] = defaultdict(list)
    for row in _active(correlations, since):
        grouped[(week_start(row.created_at), row.algorithm_version)].append(
            row.confidence_score
        )

    trends = [
        QualityTrend(
            week_start=week,
            algorithm_version=version,
            total=len(scores),
            average_confidence=round(fmean(scores), 2),
            high_confidence_rate=_pct(
                sum(1 for score in scores if score >= HIGH_CONFIDENCE_THRESHOLD), len(scores)
            ),
        )
        for (week, version), scores in grouped.items()
    ]
    trends.sort(key=lambda trend: (trend.week_start, trend.algorithm_version))
    trends.reverse()
    return trends


@dataclass(slots=True)
class AuditActivity:
    total: int
    action_counts: dict[AuditAction, int]
    average_confidence_delta: float | None
    actors: int


def audit_activity(
    entries: Iterable[AuditEntry], *, since: datetime | None = None
) -> AuditActivity:
    rows = [entry for entry in entries if since is None or entry.created_at >= since]
    actions = Counter(entry.action for entry in rows)
    deltas = [float(entry.confidence_delta) for entry in rows if entry.confidence_delta is not None]
    return AuditActivity(
        total=len(rows),
        action_counts={action: actions.get(action, 0) for action in AuditAction},
        average_confidence_delta=_avg(deltas),
        actors=len({entry.actor_id for entry in rows if entry.actor_id}),
    )
