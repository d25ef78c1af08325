"""SQLAlchemy adapter package for tripmatch."""

from __future__ import annotations

from .mappings import (
    alias_entry_table,
    audit_entry_table,
    correlation_table,
    create_all_tables,
    mapper_registry,
    start_mappers,
)
from .repositories import (
    SqlAlchemyAliasRepository,
    SqlAlchemyAuditLogRepository,
    SqlAlchemyCorrelationRepository,
)
from .unit_of_work import (
    SqlAlchemyUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyAliasRepository",
    "SqlAlchemyAuditLogRepository",
    "SqlAlchemyCorrelationRepository",
    "SqlAlchemyUnitOfWork",
    "StartupError",
    "alias_entry_table",
    "audit_entry_table",
    "configured_engine",
    "correlation_table",
    "create_all_tables",
    "is_started",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
