"""Alias catalog curation and name resolution services."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from tripmatch.config.matching import MatchingConfig
from tripmatch.domain.errors import NotFoundError, ValidationError
from tripmatch.domain.model import AliasEntry, EntityKind
from tripmatch.domain.resolution import NameResolver
from tripmatch.domain.resolution.seed import DEFAULT_ALIAS_SEED

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from uuid import UUID

    from tripmatch.domain.ports.unit_of_work import CorrelationUnitOfWork
    from tripmatch.domain.resolution import ResolutionResult
    from tripmatch.domain.resolution.seed import AliasSeed

    UnitOfWorkFactory = Callable[[], CorrelationUnitOfWork]

log = getLogger(__name__)


@dataclass(slots=True)
class CatalogImportResult:
    added: int
    skipped: int


def resolve_name(
    text: str | None,
    kind: EntityKind,
    *,
    unit_of_work_factory: UnitOfWorkFactory,
    config: MatchingConfig | None = None,
) -> ResolutionResult:
    """Resolve one name against the stored catalog. Read-only."""

    cfg = config or MatchingConfig()
    with unit_of_work_factory() as uow:
        resolver = NameResolver(uow.repositories.aliases, fuzzy_threshold=cfg.fuzzy_threshold)
        return resolver.resolve(text, kind)


def add_alias(
    kind: EntityKind,
    canonical_id: str,
    alias_text: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory,
    config: MatchingConfig | None = None,
    alias_kind: str | None = None,
    confidence_boost: int | None = None,
    exact_match_required: bool = False,
    notes: str | None = None,
) -> AliasEntry:
    """Add one alias; the boost defaults to the configured value for ``kind``."""

    cfg = config or MatchingConfig()
    entry = AliasEntry(
        entity_kind=kind,
        canonical_id=canonical_id.strip(),
        alias_text=alias_text.strip(),
        alias_kind=alias_kind,
        confidence_boost=(
            cfg.default_boost(kind) if confidence_boost is None else confidence_boost
        ),
        exact_match_required=exact_match_required,
        notes=notes,
    )
    with unit_of_work_factory() as uow:
        repository = uow.repositories.aliases
        if repository.find(entry.entity_kind, entry.canonical_id, entry.alias_text) is not None:
            raise ValidationError(
                f"{kind} alias {entry.alias_text!r} already maps to {entry.canonical_id}"
            )
        repository.add(entry)
        uow.commit()
    log.info("Added %s alias %r -> %s", kind, entry.alias_text, entry.canonical_id)
    return entry


def remove_alias(alias_id: UUID, *, unit_of_work_factory: UnitOfWorkFactory) -> AliasEntry:
    with unit_of_work_factory() as uow:
        repository = uow.repositories.aliases
        entry = repository.get(alias_id)
        if entry is None:
            raise NotFoundError(f"alias {alias_id} does not exist")
        repository.remove(entry)
        uow.commit()
    log.info("Removed %s alias %r -> %s", entry.entity_kind, entry.alias_text, entry.canonical_id)
    return entry


def import_aliases(
    entries: Iterable[AliasEntry], *, unit_of_work_factory: UnitOfWorkFactory
) -> CatalogImportResult:
    """Add aliases in one transaction, skipping pairs the catalog already holds."""

    added = 0
    skipped = 0
    seen: set[tuple[EntityKind, str, str]] = set()
    with unit_of_work_factory() as uow:
        repository = uow.repositories.aliases
        for entry in entries:
            key = entry.identity
            if key in seen or repository.find(*key) is not None:
                skipped += 1
                continue
            seen.add(key)
            repository.add(entry)
            added += 1
        uow.commit()
    log.info("Alias import finished: added=%d, skipped=%d", added, skipped)
    return CatalogImportResult(added=added, skipped=skipped)


def seed_alias_catalog(
    *,
    unit_of_work_factory: UnitOfWorkFactory,
    seeds: Iterable[AliasSeed] = DEFAULT_ALIAS_SEED,
) -> CatalogImportResult:
    """Load the built-in reference aliases. Running it again adds nothing."""

    return import_aliases(
        (
            AliasEntry(
                entity_kind=seed.kind,
                canonical_id=seed.canonical_id,
                alias_text=seed.alias_text,
                alias_kind=seed.alias_kind,
                confidence_boost=seed.confidence_boost,
                notes=seed.notes,
            )
            for seed in seeds
        ),
        unit_of_work_factory=unit_of_work_factory,
    )


def list_aliases(
    kind: EntityKind | None = None, *, unit_of_work_factory: UnitOfWorkFactory
) -> list[AliasEntry]:
    kinds = (kind,) if kind is not None else tuple(EntityKind)
    with unit_of_work_factory() as uow:
        return [entry for each in kinds for entry in uow.repositories.aliases.list_by_kind(each)]
