from __future__ import annotations

import pytest

from tripmatch.domain.model import EntityKind, MatchType
from tripmatch.domain.resolution import InMemoryAliasCatalog, NameResolver
from tests.helpers.correlations import make_alias


def test_exact_match_ignores_case_and_padding(kcgm_resolver: NameResolver) -> None:
    result = kcgm_resolver.resolve("  kcgm fimiston ", EntityKind.BUSINESS)

    assert result.match_type is MatchType.EXACT
    assert result.resolved_canonical_id == "KCGM"
    assert result.matched_alias == "KCGM FIMISTON"
    assert result.score == 15.0
    assert result.confidence_boost == 15


def test_misspelt_name_resolves_fuzzily(kcgm_resolver: NameResolver) -> None:
    result = kcgm_resolver.resolve("KALGOORLIE CONSOLIDATED GOLD MNES", EntityKind.BUSINESS)

    assert result.match_type is MatchType.FUZZY
    assert result.resolved_canonical_id == "KCGM"
    assert result.matched_alias == "KALGOORLIE CONSOLIDATED GOLD MINES"
    assert 0.8 < result.score < 0.9


def test_resolution_is_scoped_to_kind(kcgm_resolver: NameResolver) -> None:
    result = kcgm_resolver.resolve("KALGOORLIE", EntityKind.BUSINESS)

    assert result.match_type is MatchType.NONE
    assert kcgm_resolver.resolve("KALGOORLIE", EntityKind.LOCATION).resolved_canonical_id == (
        "KALGOORLIE"
    )


def test_unknown_name_passes_through(kcgm_resolver: NameResolver) -> None:
    result = kcgm_resolver.resolve(" Acme Haulage ", EntityKind.BUSINESS)

    assert result.match_type is MatchType.NONE
    assert result.resolved_canonical_id is None
    assert result.is_match is False
    assert result.score == 0.0
    assert result.canonical_value == "ACME HAULAGE"


@pytest.mark.parametrize("text", [None, "", "   "])
def test_empty_input_passes_through(kcgm_resolver: NameResolver, text: str | None) -> None:
    result = kcgm_resolver.resolve(text, EntityKind.TERMINAL)

    assert result.match_type is MatchType.NONE
    assert result.canonical_value == ""


def test_exact_ties_prefer_highest_boost_then_smallest_id() -> None:
    catalog = InMemoryAliasCatalog(
        [
            make_alias("PERTH AIRPORT", "ZULU", boost=20),
            make_alias("PERTH AIRPORT", "BRAVO", boost=20),
            make_alias("PERTH AIRPORT", "ALPHA", boost=10),
        ]
    )

    result = NameResolver(catalog).resolve("perth airport", EntityKind.BUSINESS)

    assert result.resolved_canonical_id == "BRAVO"


def test_exact_match_wins_over_higher_boost_fuzzy() -> None:
    catalog = InMemoryAliasCatalog(
        [
            make_alias("WORSLEY", "SOUTH32_WORSLEY", boost=5),
            make_alias("WORSLEYS", "OTHER", boost=100),
        ]
    )

    result = NameResolver(catalog).resolve("WORSLEY", EntityKind.BUSINESS)

    assert result.match_type is MatchType.EXACT
    assert result.resolved_canonical_id == "SOUTH32_WORSLEY"


def test_exact_only_aliases_skip_fuzzy_pass() -> None:
    strict = InMemoryAliasCatalog([make_alias("KCGM FIMISTON", "KCGM", exact_match_required=True)])
    loose = InMemoryAliasCatalog([make_alias("KCGM FIMISTON", "KCGM")])

    assert NameResolver(strict).resolve("KCGM FIMISTONN", EntityKind.BUSINESS).match_type is (
        MatchType.NONE
    )
    assert NameResolver(loose).resolve("KCGM FIMISTONN", EntityKind.BUSINESS).match_type is (
        MatchType.FUZZY
    )
    assert NameResolver(strict).resolve("kcgm fimiston", EntityKind.BUSINESS).match_type is (
        MatchType.EXACT
    )


def test_fuzzy_threshold_is_exclusive() -> None:
    # "KCGM FIMISTONN" vs "KCGM FIMISTON" shares 13 of 16 trigrams.
    catalog = InMemoryAliasCatalog([make_alias("KCGM FIMISTON", "KCGM")])

    at_threshold = NameResolver(catalog, fuzzy_threshold=0.8125)
    below_threshold = NameResolver(catalog, fuzzy_threshold=0.8)

    assert at_threshold.resolve("KCGM FIMISTONN", EntityKind.BUSINESS).is_match is False
    assert below_threshold.resolve("KCGM FIMISTONN", EntityKind.BUSINESS).score == 0.8125


def test_snapshot_copies_every_kind() -> None:
    source = InMemoryAliasCatalog(
        [
            make_alias("FIMISTON", "KCGM"),
            make_alias("KALGOORLIE", "KALGOORLIE", kind=EntityKind.LOCATION),
        ]
    )

    copy = InMemoryAliasCatalog.snapshot(source)

    assert len(copy) == 2
    assert [entry.alias_text for entry in copy.list_by_kind(EntityKind.LOCATION)] == ["KALGOORLIE"]
    assert copy.list_by_kind(EntityKind.TERMINAL) == ()


def test_kcgm_aliases_end_to_end(kcgm_resolver: NameResolver) -> None:
    exact = kcgm_resolver.resolve("KCGM FIMISTON EX KALGOORLIE", EntityKind.BUSINESS)
    fuzzy = kcgm_resolver.resolve("KALGOORLIE CONSOLIDATED GOLD MNES", EntityKind.BUSINESS)
    unknown = kcgm_resolver.resolve("RANDOM UNKNOWN PTY LTD", EntityKind.BUSINESS)

    assert (exact.match_type, exact.resolved_canonical_id, exact.score) == (
        MatchType.EXACT,
        "KCGM",
        20.0,
    )
    assert (fuzzy.match_type, fuzzy.resolved_canonical_id) == (MatchType.FUZZY, "KCGM")
    assert unknown.resolved_canonical_id is None
    assert unknown.canonical_value == "RANDOM UNKNOWN PTY LTD"
