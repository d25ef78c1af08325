from __future__ import annotations

from uuid import uuid4

import pytest

from tripmatch.config import MatchingConfig
from tripmatch.domain.catalog import (
    add_alias,
    import_aliases,
    list_aliases,
    remove_alias,
    resolve_name,
    seed_alias_catalog,
)
from tripmatch.domain.errors import NotFoundError, ValidationError
from tripmatch.domain.model import EntityKind, MatchType
from tripmatch.domain.resolution.seed import (
    BUSINESS_ALIASES,
    DEFAULT_ALIAS_SEED,
    LOCATION_ALIASES,
    TERMINAL_ALIASES,
    TERMINALS,
)
from tests.helpers.correlations import FakeUnitOfWork, make_alias


def test_seed_is_idempotent() -> None:
    uow = FakeUnitOfWork()

    first = seed_alias_catalog(unit_of_work_factory=uow)
    second = seed_alias_catalog(unit_of_work_factory=uow)

    assert (first.added, first.skipped) == (len(DEFAULT_ALIAS_SEED), 0)
    assert (second.added, second.skipped) == (0, len(DEFAULT_ALIAS_SEED))
    assert len(uow.repositories.aliases.items) == len(DEFAULT_ALIAS_SEED)


def test_seed_covers_every_terminal_format() -> None:
    assert len(TERMINAL_ALIASES) == 3 * len(TERMINALS)
    texts = {seed.alias_text for seed in TERMINAL_ALIASES}
    assert {"AU TERM KEWDALE", "TERMINAL KEWDALE", "KEWDALE"} <= texts
    assert "AU THDPTY COOGEE ROCKINGHAM" in texts
    assert {seed.canonical_id for seed in BUSINESS_ALIASES} >= {"KCGM", "BGC", "JUNDEE_MINE"}
    assert all(seed.kind is EntityKind.LOCATION for seed in LOCATION_ALIASES)


def test_seeded_catalog_resolves_payment_formats() -> None:
    uow = FakeUnitOfWork()
    seed_alias_catalog(unit_of_work_factory=uow)

    terminal = resolve_name("au term kalgoorlie", EntityKind.TERMINAL, unit_of_work_factory=uow)
    business = resolve_name("BGC NAVAL BASE", EntityKind.BUSINESS, unit_of_work_factory=uow)

    assert (terminal.match_type, terminal.resolved_canonical_id) == (MatchType.EXACT, "Kalgoorlie")
    assert business.resolved_canonical_id == "BGC"


def test_add_alias_defaults_boost_per_kind() -> None:
    uow = FakeUnitOfWork()
    config = MatchingConfig(
        default_confidence_boosts=(
            (EntityKind.BUSINESS, 12),
            (EntityKind.LOCATION, 10),
            (EntityKind.TERMINAL, 15),
        )
    )

    entry = add_alias(
        EntityKind.BUSINESS,
        " ACME ",
        " ACME HAULAGE ",
        unit_of_work_factory=uow,
        config=config,
        alias_kind="full_name",
    )

    assert entry.confidence_boost == 12
    assert entry.canonical_id == "ACME"
    assert entry.alias_text == "ACME HAULAGE"
    assert uow.commits == 1


def test_add_alias_rejects_duplicates() -> None:
    uow = FakeUnitOfWork()
    add_alias(EntityKind.BUSINESS, "ACME", "ACME HAULAGE", unit_of_work_factory=uow)

    with pytest.raises(ValidationError, match="already maps"):
        add_alias(EntityKind.BUSINESS, "ACME", "ACME HAULAGE", unit_of_work_factory=uow)

    # the same text may point at another identity or live under another kind
    add_alias(EntityKind.BUSINESS, "ACME_WEST", "ACME HAULAGE", unit_of_work_factory=uow)
    add_alias(EntityKind.LOCATION, "ACME", "ACME HAULAGE", unit_of_work_factory=uow)
    assert len(list_aliases(unit_of_work_factory=uow)) == 3


def test_remove_alias() -> None:
    uow = FakeUnitOfWork()
    entry = add_alias(EntityKind.TERMINAL, "Albany", "ALBANY PORT", unit_of_work_factory=uow)

    removed = remove_alias(entry.id, unit_of_work_factory=uow)

    assert removed is entry
    assert list_aliases(EntityKind.TERMINAL, unit_of_work_factory=uow) == []
    with pytest.raises(NotFoundError):
        remove_alias(uuid4(), unit_of_work_factory=uow)


def test_import_skips_repeats_within_batch() -> None:
    uow = FakeUnitOfWork()

    result = import_aliases(
        [make_alias("FIMISTON", "KCGM"), make_alias("FIMISTON", "KCGM", boost=5)],
        unit_of_work_factory=uow,
    )

    assert (result.added, result.skipped) == (1, 1)
    assert uow.repositories.aliases.items[0].confidence_boost == 20
