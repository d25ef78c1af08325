"""Alias-based name resolution."""

from tripmatch.domain.resolution.normalize import name_tokens, normalize_name
from tripmatch.domain.resolution.resolver import (
    AliasCatalog,
    InMemoryAliasCatalog,
    NameResolver,
    ResolutionResult,
)
from tripmatch.domain.resolution.similarity import trigram_similarity

__all__ = [
    "AliasCatalog",
    "InMemoryAliasCatalog",
    "NameResolver",
    "ResolutionResult",
    "name_tokens",
    "normalize_name",
    "trigram_similarity",
]
