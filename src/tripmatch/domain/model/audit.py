"""Append-only audit records for correlation mutations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from tripmatch.domain.model.base import utcnow

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from tripmatch.domain.model.enums import AuditAction


@dataclass(eq=False, kw_only=True)
class AuditEntry:
    """One mutation of a correlation, with full before/after images.

    ``id`` is assigned by the store on insert and gives the chronological order of
    the log. Entries carry no foreign key so they outlive a deleted correlation.
    """

    correlation_id: UUID
    trip_id: str
    payment_key: str
    action: AuditAction
    changed_fields: tuple[str, ...] = ()
    old_values: dict[str, Any] | None = None
    new_values: dict[str, Any] | None = None
    old_confidence: int | None = None
    new_confidence: int | None = None
    confidence_delta: int | None = None
    actor_id: str | None = None
    reason: str | None = None
    algorithm_version: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    id: int | None = None
