"""Alias catalog reference data."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from tripmatch.domain.errors import ValidationError
from tripmatch.domain.model.base import Entity, utcnow

if TYPE_CHECKING:
    from datetime import datetime

    from tripmatch.domain.model.enums import EntityKind

MIN_CONFIDENCE_BOOST: Final[int] = 0
MAX_CONFIDENCE_BOOST: Final[int] = 100


@dataclass(eq=False, kw_only=True)
class AliasEntry(Entity):
    """A known spelling of a canonical business, location or terminal.

    ``alias_text`` is stored exactly as curated; comparison normalises it on the
    fly so curators can keep human-readable forms. ``alias_kind`` is informational
    only and never influences scoring.
    """

    entity_kind: EntityKind
    canonical_id: str
    alias_text: str
    confidence_boost: int
    alias_kind: str | None = None
    exact_match_required: bool = False
    notes: str | None = None
    created_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if not self.canonical_id or not self.canonical_id.strip():
            raise ValidationError("alias canonical_id must not be blank")
        if not self.alias_text or not self.alias_text.strip():
            raise ValidationError("alias_text must not be blank")
        if not MIN_CONFIDENCE_BOOST <= self.confidence_boost <= MAX_CONFIDENCE_BOOST:
            raise ValidationError(
                f"confidence_boost must be within [{MIN_CONFIDENCE_BOOST}, "
                f"{MAX_CONFIDENCE_BOOST}], got {self.confidence_boost}"
            )

    @property
    def identity(self) -> tuple[EntityKind, str, str]:
        """Uniqueness key within the catalog."""
        return (self.entity_kind, self.canonical_id, self.alias_text)
