"""Typed readers for optional ``TRIPMATCH_*`` environment overrides.

Unset or blank variables fall back to the default; values that do not parse
raise ``ConfigurationError`` naming the variable.
"""

from __future__ import annotations

import os

from .errors import ConfigurationError


def _raw(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def optional_env_str(name: str, default: str) -> str:
    value = _raw(name)
    return default if value is None else value


def optional_env_float(name: str, default: float) -> float:
    value = _raw(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from exc


def optional_env_int(name: str, default: int) -> int:
    value = _raw(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from exc
