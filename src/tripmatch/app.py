"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta
from logging import getLogger
from typing import TYPE_CHECKING

from tripmatch.adapters.jsonfile import load_aliases, load_payments, load_trip
from tripmatch.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, is_started, startup
from tripmatch.config import get_matching_config
from tripmatch.domain import catalog, correlation, reporting
from tripmatch.domain.model import utcnow
from tripmatch.domain.ports.unit_of_work import CorrelationUnitOfWork

if TYPE_CHECKING:
    from pathlib import Path
    from uuid import UUID

    from tripmatch.config import MatchingConfig
    from tripmatch.domain.model import AliasEntry, AuditEntry, Correlation, EntityKind
    from tripmatch.domain.resolution import ResolutionResult

UnitOfWorkFactory = Callable[[], CorrelationUnitOfWork]


log = getLogger(__name__)


def _ensure_started() -> None:
    if not is_started():
        startup()


def _factory(unit_of_work_factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if unit_of_work_factory is not None:
        return unit_of_work_factory
    _ensure_started()
    return SqlAlchemyUnitOfWork


def resolve_name(
    text: str,
    kind: EntityKind,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: MatchingConfig | None = None,
) -> ResolutionResult:
    return catalog.resolve_name(
        text,
        kind,
        unit_of_work_factory=_factory(unit_of_work_factory),
        config=config or get_matching_config(),
    )


def seed_aliases(
    *, unit_of_work_factory: UnitOfWorkFactory | None = None
) -> catalog.CatalogImportResult:
    result = catalog.seed_alias_catalog(unit_of_work_factory=_factory(unit_of_work_factory))
    log.info("Seeded alias catalog: added=%s, skipped=%s", result.added, result.skipped)
    return result


def import_alias_file(
    path: Path,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: MatchingConfig | None = None,
) -> catalog.CatalogImportResult:
    entries = load_aliases(path, config or get_matching_config())
    return catalog.import_aliases(entries, unit_of_work_factory=_factory(unit_of_work_factory))


def add_alias(
    kind: EntityKind,
    canonical_id: str,
    alias_text: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: MatchingConfig | None = None,
    alias_kind: str | None = None,
    confidence_boost: int | None = None,
    exact_match_required: bool = False,
    notes: str | None = None,
) -> AliasEntry:
    return catalog.add_alias(
        kind,
        canonical_id,
        alias_text,
        unit_of_work_factory=_factory(unit_of_work_factory),
        config=config or get_matching_config(),
        alias_kind=alias_kind,
        confidence_boost=confidence_boost,
        exact_match_required=exact_match_required,
        notes=notes,
    )


def remove_alias(
    alias_id: UUID, *, unit_of_work_factory: UnitOfWorkFactory | None = None
) -> AliasEntry:
    return catalog.remove_alias(alias_id, unit_of_work_factory=_factory(unit_of_work_factory))


def list_aliases(
    kind: EntityKind | None = None, *, unit_of_work_factory: UnitOfWorkFactory | None = None
) -> list[AliasEntry]:
    return catalog.list_aliases(kind, unit_of_work_factory=_factory(unit_of_work_factory))


def evaluate_files(
    trip_path: Path,
    payments_path: Path,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: MatchingConfig | None = None,
    actor_id: str | None = None,
    min_confidence: int | None = None,
) -> list[Correlation]:
    """Evaluate one trip file against a payments file."""

    trip = load_trip(trip_path)
    payments = load_payments(payments_path)
    log.info(
        "Evaluating trip %s against %d payment(s) from %s",
        trip.trip_id,
        len(payments),
        payments_path,
    )
    return correlation.evaluate_trip(
        trip,
        payments,
        unit_of_work_factory=_factory(unit_of_work_factory),
        config=config or get_matching_config(),
        actor_id=actor_id,
        min_confidence=min_confidence,
    )


def verify_correlation(
    correlation_id: UUID,
    actor_id: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Correlation:
    return correlation.verify_correlation(
        correlation_id, actor_id, unit_of_work_factory=_factory(unit_of_work_factory)
    )


def reject_correlation(
    correlation_id: UUID,
    actor_id: str,
    reason: str | None = None,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Correlation:
    return correlation.reject_correlation(
        correlation_id, actor_id, reason, unit_of_work_factory=_factory(unit_of_work_factory)
    )


def delete_correlation(
    correlation_id: UUID,
    actor_id: str,
    *,
    reason: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> AuditEntry:
    return correlation.delete_correlation(
        correlation_id,
        actor_id,
        reason=reason,
        unit_of_work_factory=_factory(unit_of_work_factory),
    )


def audit_trail(
    correlation_id: UUID,
    *,
    after: int | None = None,
    limit: int | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[AuditEntry]:
    return correlation.list_audit_trail(
        correlation_id,
        after=after,
        limit=limit,
        unit_of_work_factory=_factory(unit_of_work_factory),
    )


@dataclass(slots=True)
class QualityReport:
    dashboard: reporting.QualityDashboard
    algorithms: list[reporting.AlgorithmPerformance]
    terminals: list[reporting.TerminalPerformance]
    trends: list[reporting.QualityTrend]
    audit: reporting.AuditActivity


def quality_report(
    *,
    days: int | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> QualityReport:
    """Build every report over the last ``days`` days (all history when omitted)."""

    since = utcnow() - timedelta(days=days) if days is not None else None
    factory = _factory(unit_of_work_factory)
    correlations = correlation.list_correlations(unit_of_work_factory=factory, since=since)
    with factory() as uow:
        entries = list(uow.repositories.audit_log.list(since=since))
    return QualityReport(
        dashboard=reporting.build_quality_dashboard(correlations),
        algorithms=reporting.algorithm_performance(correlations),
        terminals=reporting.terminal_performance(correlations),
        trends=reporting.quality_trends(correlations),
        audit=reporting.audit_activity(entries),
    )
