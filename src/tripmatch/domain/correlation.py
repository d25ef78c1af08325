"""Correlation lifecycle services.

Every mutation of a correlation and its audit entry happen inside one unit of
work: the correlation is flushed first, then the audit entry. If the audit write
fails the whole unit of work is rolled back and ``AuditWriteFailure`` is raised.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from tripmatch.config.matching import MatchingConfig
from tripmatch.domain.audit import Snapshot, build_audit_entry, snapshot
from tripmatch.domain.errors import (
    AuditWriteFailure,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from tripmatch.domain.model import Correlation
from tripmatch.domain.resolution import InMemoryAliasCatalog, NameResolver
from tripmatch.domain.scoring import assess

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from datetime import datetime
    from uuid import UUID

    from tripmatch.domain.model import (
        AuditEntry,
        CorrelationAssessment,
        PaymentRecord,
        TripRecord,
    )
    from tripmatch.domain.ports.unit_of_work import CorrelationUnitOfWork

    UnitOfWorkFactory = Callable[[], CorrelationUnitOfWork]

log = getLogger(__name__)


def evaluate_correlation(
    trip: TripRecord,
    payment: PaymentRecord,
    *,
    unit_of_work_factory: UnitOfWorkFactory,
    config: MatchingConfig | None = None,
    actor_id: str | None = None,
) -> Correlation:
    """Score a trip/payment pair and persist it as a proposed correlation.

    A proposed correlation for the same pair and algorithm version is re-fused in
    place; identical inputs leave it untouched and write no audit entry.
    """

    cfg = config or MatchingConfig()
    with unit_of_work_factory() as uow:
        resolver = _snapshot_resolver(uow, cfg)
        correlation = _evaluate_pair(uow, trip, payment, resolver, cfg, actor_id)
        uow.commit()
    return correlation


def evaluate_trip(
    trip: TripRecord,
    payments: Iterable[PaymentRecord],
    *,
    unit_of_work_factory: UnitOfWorkFactory,
    config: MatchingConfig | None = None,
    actor_id: str | None = None,
    min_confidence: int | None = None,
) -> list[Correlation]:
    """Evaluate a trip against every payment inside the candidate window.

    Candidates are visited by ascending day gap, then payment key. When
    ``min_confidence`` is given, lower-scoring candidates are skipped without
    being persisted. A trip without a date is compared with every payment.
    """

    cfg = config or MatchingConfig()
    candidates = _candidate_payments(trip, payments, cfg.candidate_window_days)
    persisted: list[Correlation] = []
    with unit_of_work_factory() as uow:
        resolver = _snapshot_resolver(uow, cfg)
        for payment in candidates:
            assessment = assess(trip, payment, resolver, cfg)
            if min_confidence is not None and assessment.confidence_score < min_confidence:
                log.debug(
                    "Skipping payment %s for trip %s: %d < %d",
                    payment.payment_key,
                    trip.trip_id,
                    assessment.confidence_score,
                    min_confidence,
                )
                continue
            persisted.append(_store_assessment(uow, trip, payment, assessment, cfg, actor_id))
        uow.commit()
    log.info(
        "Evaluated trip %s: %d candidate(s), %d persisted",
        trip.trip_id,
        len(candidates),
        len(persisted),
    )
    return persisted


def refuse_correlation(
    correlation_id: UUID,
    trip: TripRecord,
    payment: PaymentRecord,
    *,
    unit_of_work_factory: UnitOfWorkFactory,
    config: MatchingConfig | None = None,
    actor_id: str | None = None,
) -> Correlation:
    """Re-score an existing proposed correlation with fresh record data."""

    cfg = config or MatchingConfig()
    with unit_of_work_factory() as uow:
        correlation = _get_or_raise(uow, correlation_id)
        if correlation.trip_id != trip.trip_id or correlation.payment_key != payment.payment_key:
            raise ValidationError(
                f"records {trip.trip_id}/{payment.payment_key} do not belong to "
                f"correlation {correlation_id}"
            )
        if correlation.algorithm_version != cfg.algorithm_version:
            raise InvalidStateError(
                f"correlation {correlation_id} was produced by {correlation.algorithm_version}, "
                f"not {cfg.algorithm_version}"
            )
        resolver = _snapshot_resolver(uow, cfg)
        before = snapshot(correlation)
        correlation.apply_assessment(assess(trip, payment, resolver, cfg))
        if _record(uow, correlation, before, snapshot(correlation), actor_id=actor_id):
            log.info("Re-fused correlation %s", correlation.id)
        uow.commit()
    return correlation


def verify_correlation(
    correlation_id: UUID,
    actor_id: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory,
) -> Correlation:
    with unit_of_work_factory() as uow:
        correlation = _get_or_raise(uow, correlation_id)
        before = snapshot(correlation)
        correlation.verify(actor_id)
        _record(uow, correlation, before, snapshot(correlation), actor_id=actor_id)
        uow.commit()
    log.info("Correlation %s verified by %s", correlation_id, actor_id)
    return correlation


def reject_correlation(
    correlation_id: UUID,
    actor_id: str,
    reason: str | None = None,
    *,
    unit_of_work_factory: UnitOfWorkFactory,
) -> Correlation:
    with unit_of_work_factory() as uow:
        correlation = _get_or_raise(uow, correlation_id)
        before = snapshot(correlation)
        correlation.reject(actor_id, reason)
        _record(uow, correlation, before, snapshot(correlation), actor_id=actor_id, reason=reason)
        uow.commit()
    log.info("Correlation %s rejected by %s", correlation_id, actor_id)
    return correlation


def delete_correlation(
    correlation_id: UUID,
    actor_id: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory,
    reason: str | None = None,
) -> AuditEntry:
    """Hard-delete a correlation (administrative action), keeping its last image."""

    if not actor_id or not actor_id.strip():
        raise ValidationError("actor_id is required to delete a correlation")
    with unit_of_work_factory() as uow:
        correlation = _get_or_raise(uow, correlation_id)
        entry = build_audit_entry(
            correlation, snapshot(correlation), None, actor_id=actor_id, reason=reason
        )
        uow.repositories.correlations.remove(correlation)
        _append(uow, correlation, entry)
        uow.commit()
    log.info("Correlation %s deleted by %s", correlation_id, actor_id)
    return entry


def get_correlation(
    correlation_id: UUID, *, unit_of_work_factory: UnitOfWorkFactory
) -> Correlation:
    with unit_of_work_factory() as uow:
        return _get_or_raise(uow, correlation_id)


def list_correlations(
    *,
    unit_of_work_factory: UnitOfWorkFactory,
    active_only: bool = False,
    since: datetime | None = None,
) -> list[Correlation]:
    with unit_of_work_factory() as uow:
        return list(uow.repositories.correlations.list(active_only=active_only, since=since))


def list_audit_trail(
    correlation_id: UUID,
    *,
    unit_of_work_factory: UnitOfWorkFactory,
    after: int | None = None,
    limit: int | None = None,
) -> list[AuditEntry]:
    """Audit entries of one correlation, oldest first.

    Pass the ``id`` of the last entry seen as ``after`` to fetch the next page.
    The trail stays readable after the correlation itself was deleted.
    """

    if limit is not None and limit <= 0:
        raise ValidationError("limit must be positive")
    with unit_of_work_factory() as uow:
        return list(uow.repositories.audit_log.list_for(correlation_id, after=after, limit=limit))


# -- helpers ---------------------------------------------------------------------------


def _snapshot_resolver(uow: CorrelationUnitOfWork, config: MatchingConfig) -> NameResolver:
    # one catalog read per entity kind, whatever the number of names resolved
    catalog = InMemoryAliasCatalog.snapshot(uow.repositories.aliases)
    return NameResolver(catalog, fuzzy_threshold=config.fuzzy_threshold)


def _evaluate_pair(
    uow: CorrelationUnitOfWork,
    trip: TripRecord,
    payment: PaymentRecord,
    resolver: NameResolver,
    config: MatchingConfig,
    actor_id: str | None,
) -> Correlation:
    assessment = assess(trip, payment, resolver, config)
    return _store_assessment(uow, trip, payment, assessment, config, actor_id)


def _store_assessment(
    uow: CorrelationUnitOfWork,
    trip: TripRecord,
    payment: PaymentRecord,
    assessment: CorrelationAssessment,
    config: MatchingConfig,
    actor_id: str | None,
) -> Correlation:
    repository = uow.repositories.correlations
    existing = repository.find_proposed(trip.trip_id, payment.payment_key, config.algorithm_version)
    if existing is not None:
        before = snapshot(existing)
        existing.apply_assessment(assessment)
        if _record(uow, existing, before, snapshot(existing), actor_id=actor_id):
            log.info("Updated correlation %s (%s)", existing.id, existing.quality_tier)
        return existing

    correlation = Correlation.propose(
        trip_id=trip.trip_id,
        payment_key=payment.payment_key,
        algorithm_version=config.algorithm_version,
        assessment=assessment,
    )
    repository.add(correlation)
    _record(uow, correlation, None, snapshot(correlation), actor_id=actor_id)
    log.info(
        "Proposed correlation %s for trip %s / payment %s: %d (%s)",
        correlation.id,
        trip.trip_id,
        payment.payment_key,
        correlation.confidence_score,
        correlation.quality_tier,
    )
    return correlation


def _record(
    uow: CorrelationUnitOfWork,
    correlation: Correlation,
    before: Snapshot | None,
    after: Snapshot | None,
    *,
    actor_id: str | None,
    reason: str | None = None,
) -> AuditEntry | None:
    entry = build_audit_entry(correlation, before, after, actor_id=actor_id, reason=reason)
    if not entry.changed_fields:
        return None
    _append(uow, correlation, entry)
    return entry


def _append(uow: CorrelationUnitOfWork, correlation: Correlation, entry: AuditEntry) -> None:
    uow.flush()
    try:
        uow.repositories.audit_log.add(entry)
        uow.flush()
    except AuditWriteFailure:
        log.exception("Audit write failed for correlation %s", correlation.id)
        raise
    except Exception as exc:
        log.exception("Audit write failed for correlation %s", correlation.id)
        raise AuditWriteFailure(
            f"could not record {entry.action} for correlation {correlation.id}"
        ) from exc


def _get_or_raise(uow: CorrelationUnitOfWork, correlation_id: UUID) -> Correlation:
    correlation = uow.repositories.correlations.get(correlation_id)
    if correlation is None:
        raise NotFoundError(f"correlation {correlation_id} does not exist")
    return correlation


def _candidate_payments(
    trip: TripRecord, payments: Iterable[PaymentRecord], window_days: int
) -> list[PaymentRecord]:
    if trip.trip_date is None:
        return sorted(payments, key=lambda payment: payment.payment_key)
    trip_date = trip.trip_date
    ranked: list[tuple[int, str, PaymentRecord]] = []
    for payment in payments:
        if payment.delivery_date is None:
            continue
        gap = abs((payment.delivery_date - trip_date).days)
        if gap <= window_days:
            ranked.append((gap, payment.payment_key, payment))
    ranked.sort(key=lambda item: (item[0], item[1]))
    return [payment for _gap, _key, payment in ranked]

