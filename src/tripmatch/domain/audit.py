"""Change capture for correlation mutations.

The services take a snapshot before and after each mutation and turn the pair
into one :class:`AuditEntry`; the entry is written in the same unit of work as
the mutation itself.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Final
from uuid import UUID

from tripmatch.domain.model.audit import AuditEntry
from tripmatch.domain.model.enums import AuditAction

if TYPE_CHECKING:
    from tripmatch.domain.model.correlation import Correlation

type Snapshot = dict[str, Any]

TRACKED_FIELDS: Final[tuple[str, ...]] = (
    "trip_id",
    "payment_key",
    "algorithm_version",
    "signal_scores",
    "confidence_score",
    "quality_tier",
    "quality_flags",
    "business_identifier_match",
    "location_reference_match",
    "within_service_area",
    "terminal_distance_km",
    "date_difference_days",
    "requires_manual_review",
    "customer_name",
    "terminal_name",
    "carrier",
    "verified_by_user",
    "is_active_match",
    "reviewed_by",
    "reviewed_at",
    "rejection_reason",
)
# carried in snapshots for traceability, never diffed
_UNTRACKED_FIELDS: Final[tuple[str, ...]] = ("id", "created_at", "updated_at")


def _plain(value: Any) -> Any:  # noqa: PLR0911
    if isinstance(value, Enum):
        return value.value
    if value is None or isinstance(value, bool | int | float | str):
        return value
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, frozenset | set):
        return sorted(_plain(item) for item in value)
    if isinstance(value, list | tuple):
        return [_plain(item) for item in value]
    if hasattr(value, "to_dict"):
        return value.to_dict()
    return str(value)


def snapshot(correlation: Correlation) -> Snapshot:
    """JSON-compatible image of every tracked field plus identity and timestamps."""
    return {
        name: _plain(getattr(correlation, name))
        for name in (*_UNTRACKED_FIELDS, *TRACKED_FIELDS)
    }


def diff_fields(old: Snapshot | None, new: Snapshot | None) -> tuple[str, ...]:
    """Tracked fields whose values differ; every field when one image is missing."""
    if old is None or new is None:
        return TRACKED_FIELDS
    return tuple(name for name in TRACKED_FIELDS if old.get(name) != new.get(name))


def derive_action(old: Snapshot | None, new: Snapshot | None) -> AuditAction:
    if old is None:
        return AuditAction.CREATED
    if new is None:
        return AuditAction.DELETED
    if not old.get("verified_by_user") and new.get("verified_by_user"):
        return AuditAction.VERIFIED
    if old.get("is_active_match") and not new.get("is_active_match"):
        return AuditAction.REJECTED
    return AuditAction.UPDATED


def build_audit_entry(
    correlation: Correlation,
    old: Snapshot | None,
    new: Snapshot | None,
    *,
    actor_id: str | None = None,
    reason: str | None = None,
) -> AuditEntry:
    """Build the entry for one mutation.

    An update that changed no tracked field yields an entry with empty
    ``changed_fields``; callers treat that as "nothing to record".
    """
    if old is None and new is None:
        raise ValueError("an audit entry needs at least one image")
    changed = diff_fields(old, new)

    old_confidence = old.get("confidence_score") if old is not None else None
    new_confidence = new.get("confidence_score") if new is not None else None
    delta = (
        new_confidence - old_confidence
        if old_confidence is not None and new_confidence is not None
        else None
    )
    return AuditEntry(
        correlation_id=correlation.id,
        trip_id=correlation.trip_id,
        payment_key=correlation.payment_key,
        action=derive_action(old, new),
        changed_fields=changed,
        old_values=old,
        new_values=new,
        old_confidence=old_confidence,
        new_confidence=new_confidence,
        confidence_delta=delta,
        actor_id=actor_id,
        reason=reason,
        algorithm_version=correlation.algorithm_version,
    )
