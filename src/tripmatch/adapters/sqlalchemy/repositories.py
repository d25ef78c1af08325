"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from tripmatch.adapters.sqlalchemy.mappings import (
    alias_entry_table,
    audit_entry_table,
    correlation_table,
)
from tripmatch.domain.model import AliasEntry, AuditEntry, Correlation

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime
    from uuid import UUID

    from sqlalchemy.orm import Session

    from tripmatch.domain.model import EntityKind


class SqlAlchemyAliasRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: AliasEntry) -> None:
        self.session.add(entity)

    def get(self, alias_id: UUID) -> AliasEntry | None:
        return self.session.get(AliasEntry, alias_id)

    def find(self, kind: EntityKind, canonical_id: str, alias_text: str) -> AliasEntry | None:
        stmt = (
            select(AliasEntry)
            .where(alias_entry_table.c.entity_kind == kind)
            .where(alias_entry_table.c.canonical_id == canonical_id)
            .where(alias_entry_table.c.alias_text == alias_text)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def list_by_kind(self, kind: EntityKind) -> Sequence[AliasEntry]:
        stmt = (
            select(AliasEntry)
            .where(alias_entry_table.c.entity_kind == kind)
            .order_by(alias_entry_table.c.created_at, alias_entry_table.c.alias_text)
        )
        return self.session.execute(stmt).scalars().all()

    def remove(self, entry: AliasEntry) -> None:
        self.session.delete(entry)


class SqlAlchemyCorrelationRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Correlation) -> None:
        self.session.add(entity)

    def get(self, correlation_id: UUID) -> Correlation | None:
        return self.session.get(Correlation, correlation_id)

    def find_proposed(
        self, trip_id: str, payment_key: str, algorithm_version: str
    ) -> Correlation | None:
        stmt = (
            select(Correlation)
            .where(correlation_table.c.trip_id == trip_id)
            .where(correlation_table.c.payment_key == payment_key)
            .where(correlation_table.c.algorithm_version == algorithm_version)
            .where(correlation_table.c.verified_by_user.is_(False))
            .where(correlation_table.c.is_active_match.is_(True))
            .order_by(correlation_table.c.created_at.desc())
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def list(
        self, *, active_only: bool = False, since: datetime | None = None
    ) -> Sequence[Correlation]:
        stmt = select(Correlation)
        if active_only:
            stmt = stmt.where(correlation_table.c.is_active_match.is_(True))
        if since is not None:
            stmt = stmt.where(correlation_table.c.created_at >= since)
        stmt = stmt.order_by(correlation_table.c.created_at, correlation_table.c.id)
        return self.session.execute(stmt).scalars().all()

    def remove(self, correlation: Correlation) -> None:
        self.session.delete(correlation)


class SqlAlchemyAuditLogRepository:
    """Append-only access to the audit log; there is no update or remove."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: AuditEntry) -> None:
        self.session.add(entity)

    def list_for(
        self, correlation_id: UUID, *, after: int | None = None, limit: int | None = None
    ) -> Sequence[AuditEntry]:
        stmt = select(AuditEntry).where(audit_entry_table.c.correlation_id == correlation_id)
        if after is not None:
            stmt = stmt.where(audit_entry_table.c.id > after)
        stmt = stmt.order_by(audit_entry_table.c.id)
        if limit is not None:
            stmt = stmt.limit(limit)
        return self.session.execute(stmt).scalars().all()

    def list(self, *, since: datetime | None = None) -> Sequence[AuditEntry]:
        stmt = select(AuditEntry)
        if since is not None:
            stmt = stmt.where(audit_entry_table.c.created_at >= since)
        return self.session.execute(stmt.order_by(audit_entry_table.c.id)).scalars().all()


if TYPE_CHECKING:
    from tripmatch.domain.ports.persistence import (
        AliasRepository,
        AuditLogRepository,
        CorrelationRepository,
    )

    def _check_alias(session: Session) -> AliasRepository:
        return SqlAlchemyAliasRepository(session)

    def _check_correlation(session: Session) -> CorrelationRepository:
        return SqlAlchemyCorrelationRepository(session)

    def _check_audit(session: Session) -> AuditLogRepository:
        return SqlAlchemyAuditLogRepository(session)
