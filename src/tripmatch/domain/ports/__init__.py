"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import (
    AliasRepository,
    AuditLogRepository,
    CorrelationRepository,
    Repository,
)
from .unit_of_work import CorrelationRepositories, CorrelationUnitOfWork

__all__ = [
    "AliasRepository",
    "AuditLogRepository",
    "CorrelationRepositories",
    "CorrelationRepository",
    "CorrelationUnitOfWork",
    "Repository",
]
