"""Name normalisation shared by the resolver and the text scorer."""

from __future__ import annotations

import re
from typing import Final

_WORD_RE: Final = re.compile(r"[^\W_]+", re.UNICODE)

# Tokens that carry no identity on their own ("BGC PTY LTD" vs "ACME PTY LTD").
NOISE_TOKENS: Final[frozenset[str]] = frozenset(
    {"AND", "AU", "CO", "INC", "LIMITED", "LTD", "PTY", "THE"}
)
MIN_TOKEN_LENGTH: Final[int] = 3


def normalize_name(value: str | None) -> str:
    """Comparison form of a name: trimmed and upper-cased."""
    if value is None:
        return ""
    return value.strip().upper()


def words(value: str | None) -> list[str]:
    """Alphanumeric runs of the normalised value, in order."""
    return _WORD_RE.findall(normalize_name(value))


def name_tokens(value: str | None) -> frozenset[str]:
    """Identity-bearing tokens used for partial-overlap checks."""
    return frozenset(
        word
        for word in words(value)
        if len(word) >= MIN_TOKEN_LENGTH and word not in NOISE_TOKENS
    )
