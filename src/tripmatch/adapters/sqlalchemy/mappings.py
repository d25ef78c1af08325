"""SQLAlchemy mapping metadata for the tripmatch domain model."""

from __future__ import annotations

import json
import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING, Any, Final, cast

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    Float,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    event,
    text,
    orm,
)
from sqlalchemy.orm import configure_mappers

from tripmatch.domain.errors import AuditWriteFailure
from tripmatch.domain.model import (
    AliasEntry,
    AuditAction,
    AuditEntry,
    Correlation,
    EntityKind,
    QualityFlag,
    QualityTier,
    SignalScore,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection, Engine
    from sqlalchemy.orm import Mapper

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class QualityFlagSetType(TypeDecorator[frozenset[QualityFlag]]):
    impl = String
    cache_ok = True

    def process_bind_param(
        self, value: frozenset[QualityFlag] | None, dialect: Dialect
    ) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps(sorted(flag.value for flag in value))

    def process_result_value(self, value: str | None, dialect: Dialect) -> frozenset[QualityFlag]:
        _ = dialect
        if value is None:
            return frozenset()
        loaded = json.loads(value)
        if not isinstance(loaded, list):
            return frozenset()
        items = cast(list[Any], loaded)
        return frozenset(QualityFlag(item) for item in items if isinstance(item, str))


class SignalScoreListType(TypeDecorator[list[SignalScore]]):
    impl = Text
    cache_ok = True

    def process_bind_param(self, value: list[SignalScore] | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps([score.to_dict() for score in value])

    def process_result_value(self, value: str | None, dialect: Dialect) -> list[SignalScore]:
        _ = dialect
        if value is None:
            return []
        loaded = json.loads(value)
        if not isinstance(loaded, list):
            return []
        items = cast(list[Any], loaded)
        return [SignalScore.from_dict(item) for item in items if isinstance(item, dict)]


class StringTupleType(TypeDecorator[tuple[str, ...]]):
    impl = Text
    cache_ok = True

    def process_bind_param(self, value: tuple[str, ...] | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps(list(value))

    def process_result_value(self, value: str | None, dialect: Dialect) -> tuple[str, ...]:
        _ = dialect
        if value is None:
            return ()
        loaded = json.loads(value)
        if not isinstance(loaded, list):
            return ()
        items = cast(list[Any], loaded)
        return tuple(str(item) for item in items)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

alias_entry_table = Table(
    "alias_entry",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("entity_kind", Enum(EntityKind, native_enum=False), nullable=False),
    Column("canonical_id", String, nullable=False),
    Column("alias_text", String, nullable=False),
    Column("alias_kind", String, nullable=True),
    Column("confidence_boost", Integer, nullable=False),
    Column("exact_match_required", Boolean, nullable=False, default=False),
    Column("notes", Text, nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    UniqueConstraint("entity_kind", "canonical_id", "alias_text"),
    Index("ix_alias_entry_kind_alias_text", "entity_kind", "alias_text"),
)

PROPOSED_SQLITE: Final[str] = "verified_by_user = 0 AND is_active_match = 1"
PROPOSED_POSTGRESQL: Final[str] = "NOT verified_by_user AND is_active_match"

correlation_table = Table(
    "correlation",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("trip_id", String, nullable=False),
    Column("payment_key", String, nullable=False),
    Column("algorithm_version", String, nullable=False),
    Column("signal_scores", SignalScoreListType(), nullable=False),
    Column("confidence_score", Integer, nullable=False),
    Column(
        "quality_tier",
        Enum(QualityTier, native_enum=False),
        key="_quality_tier",
        nullable=False,
    ),
    Column("quality_flags", QualityFlagSetType(), nullable=False),
    Column("business_identifier_match", Boolean, nullable=False, default=False),
    Column("location_reference_match", Boolean, nullable=False, default=False),
    Column("within_service_area", Boolean, nullable=False, default=False),
    Column("terminal_distance_km", Float, nullable=True),
    Column("date_difference_days", Integer, nullable=True),
    Column("requires_manual_review", Boolean, nullable=False, default=True),
    Column("customer_name", String, nullable=True),
    Column("terminal_name", String, nullable=True),
    Column("carrier", String, nullable=True),
    Column("verified_by_user", Boolean, nullable=False, default=False),
    Column("is_active_match", Boolean, nullable=False, default=True),
    Column("reviewed_by", String, nullable=True),
    Column("reviewed_at", UTCDateTime(), nullable=True),
    Column("rejection_reason", Text, nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
    Index("ix_correlation_pair", "trip_id", "payment_key", "algorithm_version"),
    Index("ix_correlation_created_at", "created_at"),
    # at most one undecided candidate per pair and algorithm version
    Index(
        "uq_correlation_proposed_pair",
        "trip_id",
        "payment_key",
        "algorithm_version",
        unique=True,
        sqlite_where=text(PROPOSED_SQLITE),
        postgresql_where=text(PROPOSED_POSTGRESQL),
    ),
)

# No foreign key to correlation: entries must survive a hard delete.
audit_entry_table = Table(
    "audit_entry",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("correlation_id", UUIDColumnType, nullable=False),
    Column("trip_id", String, nullable=False),
    Column("payment_key", String, nullable=False),
    Column("action", Enum(AuditAction, native_enum=False), nullable=False),
    Column("changed_fields", StringTupleType(), nullable=False),
    Column("old_values", JSON, nullable=True),
    Column("new_values", JSON, nullable=True),
    Column("old_confidence", Integer, nullable=True),
    Column("new_confidence", Integer, nullable=True),
    Column("confidence_delta", Integer, nullable=True),
    Column("actor_id", String, nullable=True),
    Column("reason", Text, nullable=True),
    Column("algorithm_version", String, nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Index("ix_audit_entry_correlation", "correlation_id", "id"),
)

IMMUTABLE_AUDIT_MESSAGE: Final[str] = "audit entries are append-only"


def _reject_audit_mutation(mapper: Mapper[Any], connection: Connection, target: AuditEntry) -> None:
    _ = (mapper, connection)
    raise AuditWriteFailure(f"{IMMUTABLE_AUDIT_MESSAGE}; refused to change entry {target.id}")


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(AliasEntry, alias_entry_table)
    mapper_registry.map_imperatively(Correlation, correlation_table)
    mapper_registry.map_imperatively(AuditEntry, audit_entry_table)

    event.listen(AuditEntry, "before_update", _reject_audit_mutation)
    event.listen(AuditEntry, "before_delete", _reject_audit_mutation)

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
