"""Ports for persisting aliases, correlations and the audit log."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime
    from uuid import UUID

    from tripmatch.domain.model import AliasEntry, AuditEntry, Correlation, EntityKind


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class AliasRepository(Repository["AliasEntry"], Protocol):
    """Curated alias catalog; read by the resolver, written only by curators."""

    def get(self, alias_id: UUID) -> AliasEntry | None: ...

    def find(self, kind: EntityKind, canonical_id: str, alias_text: str) -> AliasEntry | None: ...

    def list_by_kind(self, kind: EntityKind) -> Sequence[AliasEntry]: ...

    def remove(self, entry: AliasEntry) -> None: ...


@runtime_checkable
class CorrelationRepository(Repository["Correlation"], Protocol):
    """Persistence contract for correlation candidates."""

    def get(self, correlation_id: UUID) -> Correlation | None: ...

    def find_proposed(
        self, trip_id: str, payment_key: str, algorithm_version: str
    ) -> Correlation | None: ...

    def list(
        self, *, active_only: bool = False, since: datetime | None = None
    ) -> Sequence[Correlation]: ...

    def remove(self, correlation: Correlation) -> None: ...


@runtime_checkable
class AuditLogRepository(Repository["AuditEntry"], Protocol):
    """Append-only audit log; entries are returned oldest first."""

    def list_for(
        self, correlation_id: UUID, *, after: int | None = None, limit: int | None = None
    ) -> Sequence[AuditEntry]: ...

    def list(self, *, since: datetime | None = None) -> Sequence[AuditEntry]: ...
