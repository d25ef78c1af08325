"""Trigram similarity, following the PostgreSQL ``pg_trgm`` definition.

Each word is lower-cased and padded with two leading blanks and one trailing
blank before being cut into trigrams; similarity is the size of the shared
trigram set divided by the size of the union.
"""

from __future__ import annotations

from functools import lru_cache

from tripmatch.domain.resolution.normalize import words


@lru_cache(maxsize=4096)
def trigrams(value: str) -> frozenset[str]:
    grams: set[str] = set()
    for word in words(value):
        padded = f"  {word.lower()} "
        grams.update(padded[i : i + 3] for i in range(len(padded) - 2))
    return frozenset(grams)


def trigram_similarity(left: str | None, right: str | None) -> float:
    """Return a ratio in ``[0, 1]``; inputs without any word score 0."""
    if not left or not right:
        return 0.0
    left_grams = trigrams(left)
    right_grams = trigrams(right)
    if not left_grams or not right_grams:
        return 0.0
    shared = len(left_grams & right_grams)
    return shared / (len(left_grams) + len(right_grams) - shared)
