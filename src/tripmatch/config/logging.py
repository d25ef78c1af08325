"""Logging setup for the tripmatch command line."""

from __future__ import annotations

import logging
import os
from typing import Final

from .errors import ConfigurationError

LOG_FORMAT: Final[str] = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# chatty at INFO: statement echo and one line per applied revision
_QUIET_LOGGERS: Final[tuple[str, ...]] = ("sqlalchemy.engine", "alembic.runtime.migration")


def log_level_from_env(default: int = logging.INFO) -> int:
    """Level named by ``TRIPMATCH_LOG_LEVEL`` (e.g. ``debug``), else ``default``."""

    name = os.getenv("TRIPMATCH_LOG_LEVEL", "").strip().upper()
    if not name:
        return default
    level = logging.getLevelNamesMapping().get(name)
    if level is None:
        raise ConfigurationError(f"TRIPMATCH_LOG_LEVEL must be a level name, got {name!r}")
    return level


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Configure the root logger once for terse CLI output.

    ``level`` falls back to ``log_level_from_env()``. Pass ``force=True`` to
    replace handlers installed earlier.
    """

    resolved = log_level_from_env() if level is None else level
    logging.basicConfig(level=resolved, format=LOG_FORMAT, datefmt="%H:%M:%S", force=force)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved, logging.WARNING))
