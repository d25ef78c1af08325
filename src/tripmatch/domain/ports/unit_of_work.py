"""Transaction boundary shared by correlation and catalog services.

A correlation mutation and its audit entry are written through the same unit,
so callers commit both or neither.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from tripmatch.domain.ports.persistence import (
        AliasRepository,
        AuditLogRepository,
        CorrelationRepository,
    )


@dataclass(slots=True)
class CorrelationRepositories:
    aliases: AliasRepository
    correlations: CorrelationRepository
    audit_log: AuditLogRepository


@runtime_checkable
class CorrelationUnitOfWork(Protocol):
    """Context manager that rolls back on error and never commits implicitly."""

    @property
    def repositories(self) -> CorrelationRepositories: ...

    def __enter__(self) -> CorrelationUnitOfWork: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def flush(self) -> None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...
