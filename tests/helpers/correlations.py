from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Literal

from tripmatch.domain.model import (
    AliasEntry,
    EntityKind,
    GeoPoint,
    PaymentRecord,
    TripRecord,
)
from tripmatch.domain.resolution import InMemoryAliasCatalog

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from datetime import datetime
    from uuid import UUID

    from tripmatch.domain.model import AuditEntry, Correlation

# Kalgoorlie terminal and the Fimiston pit, roughly 5 km apart.
KALGOORLIE = GeoPoint(latitude=-30.7490, longitude=121.4660)
FIMISTON = GeoPoint(latitude=-30.7760, longitude=121.5040)
PERTH = GeoPoint(latitude=-31.9523, longitude=115.8613)


def make_alias(
    alias_text: str,
    canonical_id: str,
    *,
    kind: EntityKind = EntityKind.BUSINESS,
    boost: int = 20,
    exact_match_required: bool = False,
) -> AliasEntry:
    return AliasEntry(
        entity_kind=kind,
        canonical_id=canonical_id,
        alias_text=alias_text,
        confidence_boost=boost,
        exact_match_required=exact_match_required,
    )


def kcgm_aliases() -> list[AliasEntry]:
    return [
        make_alias("KCGM FIMISTON EX KALGOORLIE", "KCGM", boost=20),
        make_alias("KALGOORLIE CONSOLIDATED GOLD MINES", "KCGM", boost=25),
        make_alias("KCGM FIMISTON", "KCGM", boost=15),
        make_alias("FIMISTON", "KCGM", boost=10),
        make_alias("KALGOORLIE", "KALGOORLIE", kind=EntityKind.LOCATION),
        make_alias("AU TERM KALGOORLIE", "Kalgoorlie", kind=EntityKind.TERMINAL, boost=25),
        make_alias("TERMINAL KALGOORLIE", "Kalgoorlie", kind=EntityKind.TERMINAL, boost=20),
    ]


def make_trip(
    trip_id: str = "trip-1",
    *,
    trip_date: date | None = date(2025, 3, 10),
    start_location: str | None = "KCGM FIMISTON",
    end_location: str | None = None,
    start_point: GeoPoint | None = FIMISTON,
    end_point: GeoPoint | None = None,
) -> TripRecord:
    return TripRecord(
        trip_id=trip_id,
        trip_date=trip_date,
        start_location=start_location,
        end_location=end_location,
        start_point=start_point,
        end_point=end_point,
    )


def make_payment(
    payment_key: str = "BOL-1",
    *,
    delivery_date: date | None = date(2025, 3, 10),
    customer_name: str | None = "KALGOORLIE CONSOLIDATED GOLD MINES",
    terminal_name: str | None = "AU TERM KALGOORLIE",
    carrier: str | None = "Centurion",
    delivery_point: GeoPoint | None = KALGOORLIE,
) -> PaymentRecord:
    return PaymentRecord(
        payment_key=payment_key,
        delivery_date=delivery_date,
        customer_name=customer_name,
        terminal_name=terminal_name,
        carrier=carrier,
        delivery_point=delivery_point,
    )


class FakeAliasRepository(InMemoryAliasCatalog):
    """In-memory alias catalog that also satisfies the repository port."""

    def __init__(self, entries: Iterable[AliasEntry] = ()) -> None:
        super().__init__()
        self.items: list[AliasEntry] = []
        for entry in entries:
            self.add(entry)

    def add(self, entity: AliasEntry) -> None:
        self.items.append(entity)
        self._entries[entity.entity_kind].append(entity)

    def get(self, alias_id: UUID) -> AliasEntry | None:
        return next((item for item in self.items if item.id == alias_id), None)

    def find(self, kind: EntityKind, canonical_id: str, alias_text: str) -> AliasEntry | None:
        return next(
            (item for item in self.items if item.identity == (kind, canonical_id, alias_text)),
            None,
        )

    def remove(self, entry: AliasEntry) -> None:
        self.items.remove(entry)
        self._entries[entry.entity_kind].remove(entry)


class FakeCorrelationRepository:
    def __init__(self, initial: Iterable[Correlation] | None = None) -> None:
        self.items: list[Correlation] = list(initial or [])

    def add(self, entity: Correlation) -> None:
        self.items.append(entity)

    def get(self, correlation_id: UUID) -> Correlation | None:
        return next((item for item in self.items if item.id == correlation_id), None)

    def find_proposed(
        self, trip_id: str, payment_key: str, algorithm_version: str
    ) -> Correlation | None:
        matches = [
            item
            for item in self.items
            if item.trip_id == trip_id
            and item.payment_key == payment_key
            and item.algorithm_version == algorithm_version
            and item.is_proposed
        ]
        return max(matches, key=lambda item: item.created_at) if matches else None

    def list(
        self, *, active_only: bool = False, since: datetime | None = None
    ) -> Sequence[Correlation]:
        return [
            item
            for item in self.items
            if (not active_only or item.is_active_match)
            and (since is None or item.created_at >= since)
        ]

    def remove(self, correlation: Correlation) -> None:
        self.items.remove(correlation)


class FakeAuditLogRepository:
    def __init__(self) -> None:
        self.items: list[AuditEntry] = []

    def add(self, entity: AuditEntry) -> None:
        entity.id = len(self.items) + 1
        self.items.append(entity)

    def list_for(
        self, correlation_id: UUID, *, after: int | None = None, limit: int | None = None
    ) -> Sequence[AuditEntry]:
        entries = [
            item
            for item in self.items
            if item.correlation_id == correlation_id
            and (after is None or (item.id is not None and item.id > after))
        ]
        return entries[:limit] if limit is not None else entries

    def list(self, *, since: datetime | None = None) -> Sequence[AuditEntry]:
        return [item for item in self.items if since is None or item.created_at >= since]


class FailingAuditLogRepository(FakeAuditLogRepository):
    def add(self, entity: AuditEntry) -> None:
        _ = entity
        raise RuntimeError("audit store unavailable")


if TYPE_CHECKING:
    from tripmatch.domain.ports.persistence import (
        AliasRepository,
        AuditLogRepository,
        CorrelationRepository,
    )

    _check_alias: AliasRepository = FakeAliasRepository()
    _check_correlation: CorrelationRepository = FakeCorrelationRepository()
    _check_audit: AuditLogRepository = FakeAuditLogRepository()


@dataclass(slots=True)
class _FakeRepositories:
    aliases: FakeAliasRepository
    correlations: FakeCorrelationRepository
    audit_log: FakeAuditLogRepository


class FakeUnitOfWork:
    """Unit of work over in-memory repositories.

    Rollback restores the repository contents captured on entry, so tests can
    observe that a failed operation left nothing behind.
    """

    def __init__(
        self,
        *,
        aliases: FakeAliasRepository | None = None,
        correlations: FakeCorrelationRepository | None = None,
        audit_log: FakeAuditLogRepository | None = None,
    ) -> None:
        self.repositories = _FakeRepositories(
            aliases=aliases if aliases is not None else FakeAliasRepository(),
            correlations=correlations if correlations is not None else FakeCorrelationRepository(),
            audit_log=audit_log if audit_log is not None else FakeAuditLogRepository(),
        )
        self.commits = 0
        self.flushes = 0
        self.rollbacks = 0
        self._saved: tuple[list[Correlation], list[AuditEntry]] = ([], [])

    def __call__(self) -> FakeUnitOfWork:
        return self

    def __enter__(self) -> FakeUnitOfWork:
        self._saved = (
            list(self.repositories.correlations.items),
            list(self.repositories.audit_log.items),
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: object | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        return False

    def flush(self) -> None:
        self.flushes += 1

    def commit(self) -> None:
        self.commits += 1

    def rollback(self) -> None:
        self.rollbacks += 1
        correlations, entries = self._saved
        self.repositories.correlations.items[:] = correlations
        self.repositories.audit_log.items[:] = entries
