"""Tests for the SQLAlchemy alias, correlation and audit repositories."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session  # noqa: TC002

from tripmatch.adapters.sqlalchemy.repositories import (
    SqlAlchemyAliasRepository,
    SqlAlchemyAuditLogRepository,
    SqlAlchemyCorrelationRepository,
)
from tripmatch.domain.audit import build_audit_entry, snapshot
from tripmatch.domain.model import (
    AuditAction,
    AuditEntry,
    Correlation,
    CorrelationAssessment,
    EntityKind,
    QualityFlag,
    QualityTier,
    SignalKind,
    SignalScore,
)
from tests.helpers.correlations import make_alias


def _correlation(
    trip_id: str = "trip-1", payment_key: str = "BOL-1", *, score: int = 65
) -> Correlation:
    return Correlation.propose(
        trip_id=trip_id,
        payment_key=payment_key,
        algorithm_version="fusion-v1",
        assessment=CorrelationAssessment(
            signal_scores=(
                SignalScore(
                    signal_kind=SignalKind.TEXT,
                    contribution=40,
                    used=True,
                    raw_metric=1.0,
                    detail="business_canonical_start",
                ),
                SignalScore(
                    signal_kind=SignalKind.GEOSPATIAL,
                    contribution=0,
                    used=True,
                    raw_metric=250.0,
                    detail="nearest_trip_end",
                ),
                SignalScore(signal_kind=SignalKind.TEMPORAL, contribution=score - 40, used=True),
            ),
            confidence_score=score,
            quality_flags=frozenset({QualityFlag.LONG_DISTANCE}),
            requires_manual_review=True,
            business_identifier_match=True,
            terminal_distance_km=250.0,
            date_difference_days=0,
            customer_name="KCGM",
            terminal_name="AU TERM KALGOORLIE",
            carrier="Centurion",
        ),
    )


# -- aliases -------------------------------------------------------------------------


def test_alias_repository_round_trip(sqlite_session: Session) -> None:
    repository = SqlAlchemyAliasRepository(sqlite_session)
    entry = make_alias("AU TERM KALGOORLIE", "Kalgoorlie", kind=EntityKind.TERMINAL, boost=25)
    repository.add(entry)
    repository.add(make_alias("FIMISTON", "KCGM"))
    sqlite_session.commit()
    sqlite_session.expunge_all()

    loaded = repository.get(entry.id)

    assert loaded is not None
    assert loaded.entity_kind is EntityKind.TERMINAL
    assert loaded.confidence_boost == 25
    assert loaded.created_at.tzinfo is not None
    assert repository.find(EntityKind.TERMINAL, "Kalgoorlie", "AU TERM KALGOORLIE") is not None
    assert repository.find(EntityKind.BUSINESS, "Kalgoorlie", "AU TERM KALGOORLIE") is None
    assert [item.alias_text for item in repository.list_by_kind(EntityKind.BUSINESS)] == [
        "FIMISTON"
    ]


def test_alias_repository_enforces_uniqueness(sqlite_session: Session) -> None:
    repository = SqlAlchemyAliasRepository(sqlite_session)
    repository.add(make_alias("FIMISTON", "KCGM"))
    repository.add(make_alias("FIMISTON", "KCGM", boost=5))

    with pytest.raises(IntegrityError):
        sqlite_session.commit()


def test_alias_repository_remove(sqlite_session: Session) -> None:
    repository = SqlAlchemyAliasRepository(sqlite_session)
    entry = make_alias("FIMISTON", "KCGM")
    repository.add(entry)
    sqlite_session.commit()

    repository.remove(entry)
    sqlite_session.commit()

    assert repository.get(entry.id) is None


# -- correlations --------------------------------------------------------------------


def test_correlation_repository_round_trip(sqlite_session: Session) -> None:
    repository = SqlAlchemyCorrelationRepository(sqlite_session)
    correlation = _correlation()
    repository.add(correlation)
    sqlite_session.commit()
    sqlite_session.expunge_all()

    loaded = repository.get(correlation.id)

    assert loaded is not None
    assert loaded is not correlation
    assert loaded.signal_scores == correlation.signal_scores
    assert loaded.quality_flags == frozenset({QualityFlag.LONG_DISTANCE})
    assert loaded.quality_tier is QualityTier.FAIR
    assert loaded.terminal_distance_km == 250.0
    assert loaded.created_at == correlation.created_at
    assert snapshot(loaded) == snapshot(correlation)


def test_find_proposed_skips_decided(sqlite_session: Session) -> None:
    repository = SqlAlchemyCorrelationRepository(sqlite_session)
    verified = _correlation()
    verified.verify("analyst")
    rejected = _correlation()
    rejected.reject("analyst")
    repository.add(verified)
    repository.add(rejected)
    sqlite_session.commit()

    assert repository.find_proposed("trip-1", "BOL-1", "fusion-v1") is None

    proposed = _correlation()
    repository.add(proposed)
    sqlite_session.commit()

    assert repository.find_proposed("trip-1", "BOL-1", "fusion-v1") is proposed
    assert repository.find_proposed("trip-1", "BOL-1", "fusion-v2") is None


def test_one_proposed_correlation_per_pair(sqlite_session: Session) -> None:
    repository = SqlAlchemyCorrelationRepository(sqlite_session)
    verified = _correlation()
    verified.verify("analyst")
    repository.add(verified)
    repository.add(_correlation())
    repository.add(_correlation("trip-2"))
    sqlite_session.commit()

    repository.add(_correlation())

    with pytest.raises(IntegrityError):
        sqlite_session.commit()


def test_correlation_list_filters(sqlite_session: Session) -> None:
    repository = SqlAlchemyCorrelationRepository(sqlite_session)
    old = _correlation("trip-old")
    old.created_at = datetime.now(tz=UTC) - timedelta(days=30)
    rejected = _correlation("trip-rejected")
    rejected.reject("analyst")
    recent = _correlation("trip-recent")
    for item in (old, rejected, recent):
        repository.add(item)
    sqlite_session.commit()

    everything = repository.list()
    active = repository.list(active_only=True)
    last_week = repository.list(since=datetime.now(tz=UTC) - timedelta(days=7))

    assert [item.trip_id for item in everything][0] == "trip-old"
    assert len(everything) == 3
    assert {item.trip_id for item in active} == {"trip-old", "trip-recent"}
    assert {item.trip_id for item in last_week} == {"trip-rejected", "trip-recent"}


# -- audit log -----------------------------------------------------------------------


def test_audit_log_pages_in_insert_order(sqlite_session: Session) -> None:
    repository = SqlAlchemyAuditLogRepository(sqlite_session)
    correlation = _correlation()
    created = build_audit_entry(correlation, None, snapshot(correlation), actor_id="batch")
    before = snapshot(correlation)
    correlation.verify("analyst")
    verified = build_audit_entry(correlation, before, snapshot(correlation), actor_id="analyst")
    unrelated = AuditEntry(
        correlation_id=uuid4(), trip_id="x", payment_key="y", action=AuditAction.CREATED
    )
    for entry in (created, unrelated, verified):
        repository.add(entry)
        sqlite_session.flush()
    sqlite_session.commit()

    trail = repository.list_for(correlation.id)
    first = repository.list_for(correlation.id, limit=1)
    rest = repository.list_for(correlation.id, after=first[0].id)

    assert [entry.action for entry in trail] == [AuditAction.CREATED, AuditAction.VERIFIED]
    assert created.id is not None
    assert verified.id is not None
    assert created.id < verified.id
    assert [entry.action for entry in rest] == [AuditAction.VERIFIED]
    assert len(repository.list()) == 3


def test_audit_log_keeps_images_and_fields(sqlite_session: Session) -> None:
    repository = SqlAlchemyAuditLogRepository(sqlite_session)
    correlation = _correlation()
    entry = build_audit_entry(correlation, None, snapshot(correlation), actor_id="batch")
    repository.add(entry)
    sqlite_session.commit()
    sqlite_session.expunge_all()

    [loaded] = repository.list_for(correlation.id)

    assert loaded.changed_fields == entry.changed_fields
    assert loaded.new_values == snapshot(correlation)
    assert loaded.old_values is None
    assert loaded.new_confidence == 65
    assert loaded.action is AuditAction.CREATED
