"""Generic alias resolver: exact pass, fuzzy pass, then pass-through."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from tripmatch.domain.model.enums import EntityKind, MatchType
from tripmatch.domain.resolution.normalize import normalize_name
from tripmatch.domain.resolution.similarity import trigram_similarity

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from tripmatch.domain.model.alias import AliasEntry

log = getLogger(__name__)

DEFAULT_FUZZY_THRESHOLD = 0.7


@dataclass(frozen=True, slots=True)
class ResolutionResult:
    """Outcome of one resolution call.

    ``score`` is the alias' confidence boost for exact matches and the similarity
    ratio for fuzzy ones; pass-through results score 0.
    """

    input_text: str | None
    entity_kind: EntityKind
    resolved_canonical_id: str | None
    match_type: MatchType
    score: float = 0.0
    matched_alias: str | None = None
    confidence_boost: int | None = None

    @property
    def is_match(self) -> bool:
        return self.resolved_canonical_id is not None

    @property
    def canonical_value(self) -> str:
        """Resolved identifier, or the normalised input when passing through."""
        if self.resolved_canonical_id is not None:
            return self.resolved_canonical_id
        return normalize_name(self.input_text)


@runtime_checkable
class AliasCatalog(Protocol):
    """Read access to the alias catalog."""

    def list_by_kind(self, kind: EntityKind) -> Sequence[AliasEntry]: ...


class InMemoryAliasCatalog:
    """Catalog snapshot held in memory, used for batch evaluation and tests."""

    def __init__(self, entries: Iterable[AliasEntry] = ()) -> None:
        self._entries: dict[EntityKind, list[AliasEntry]] = defaultdict(list)
        for entry in entries:
            self._entries[entry.entity_kind].append(entry)

    @classmethod
    def snapshot(cls, catalog: AliasCatalog) -> InMemoryAliasCatalog:
        entries: list[AliasEntry] = []
        for kind in EntityKind:
            entries.extend(catalog.list_by_kind(kind))
        return cls(entries)

    def list_by_kind(self, kind: EntityKind) -> Sequence[AliasEntry]:
        return tuple(self._entries.get(kind, ()))

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._entries.values())


class NameResolver:
    """Map free-text names to canonical identities of one catalog.

    Exact matches win over fuzzy ones regardless of score. Among exact matches
    the highest boost wins, then the smallest normalised alias text, then the
    smallest canonical id. Fuzzy candidates are ranked by similarity, then boost,
    then the same text/id order; aliases flagged ``exact_match_required`` never
    take part in the fuzzy pass.
    """

    def __init__(
        self, catalog: AliasCatalog, *, fuzzy_threshold: float = DEFAULT_FUZZY_THRESHOLD
    ) -> None:
        self._catalog = catalog
        self._fuzzy_threshold = fuzzy_threshold

    @property
    def fuzzy_threshold(self) -> float:
        return self._fuzzy_threshold

    def resolve(self, text: str | None, kind: EntityKind) -> ResolutionResult:
        normalized = normalize_name(text)
        if not normalized:
            return _pass_through(text, kind)

        entries = self._catalog.list_by_kind(kind)

        exact = [entry for entry in entries if normalize_name(entry.alias_text) == normalized]
        if exact:
            best = min(exact, key=_exact_rank)
            log.debug("Exact %s match %r -> %s", kind, normalized, best.canonical_id)
            return ResolutionResult(
                input_text=text,
                entity_kind=kind,
                resolved_canonical_id=best.canonical_id,
                match_type=MatchType.EXACT,
                score=float(best.confidence_boost),
                matched_alias=best.alias_text,
                confidence_boost=best.confidence_boost,
            )

        fuzzy: list[tuple[float, AliasEntry]] = []
        for entry in entries:
            if entry.exact_match_required:
                continue
            similarity = trigram_similarity(normalized, normalize_name(entry.alias_text))
            if similarity > self._fuzzy_threshold:
                fuzzy.append((similarity, entry))
        if fuzzy:
            similarity, best = min(fuzzy, key=_fuzzy_rank)
            log.debug(
                "Fuzzy %s match %r -> %s (similarity=%.3f)",
                kind,
                normalized,
                best.canonical_id,
                similarity,
            )
            return ResolutionResult(
                input_text=text,
                entity_kind=kind,
                resolved_canonical_id=best.canonical_id,
                match_type=MatchType.FUZZY,
                score=similarity,
                matched_alias=best.alias_text,
                confidence_boost=best.confidence_boost,
            )

        log.debug("No %s match for %r; passing through", kind, normalized)
        return _pass_through(text, kind)


def _exact_rank(entry: AliasEntry) -> tuple[int, str, str]:
    return (-entry.confidence_boost, normalize_name(entry.alias_text), entry.canonical_id)


def _fuzzy_rank(candidate: tuple[float, AliasEntry]) -> tuple[float, int, str, str]:
    similarity, entry = candidate
    return (-similarity, *_exact_rank(entry))


def _pass_through(text: str | None, kind: EntityKind) -> ResolutionResult:
    return ResolutionResult(
        input_text=text,
        entity_kind=kind,
        resolved_canonical_id=None,
        match_type=MatchType.NONE,
    )
