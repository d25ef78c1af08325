"""Alembic migrations for the correlation store.

The scripts ship inside the package, so ``upgrade_head`` works from an installed
wheel as well as from a checkout. The ``alembic`` command line reads the same
location from ``[tool.alembic]`` in pyproject.toml.
"""

from __future__ import annotations

from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, Final

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext

from tripmatch.config.storage import get_database_uri

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

MIGRATIONS_PATH: Final[Path] = Path(__file__).resolve().parent

log = getLogger(__name__)


def alembic_config(*, database_uri: str | None = None) -> Config:
    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_PATH))
    if database_uri is not None:
        # configparser interpolation
        config.set_main_option("sqlalchemy.url", database_uri.replace("%", "%%"))
    return config


def upgrade_head(*, engine: Engine | None = None, database_uri: str | None = None) -> None:
    """Bring the schema to the newest revision.

    With ``engine`` the upgrade runs on one of its connections inside a single
    transaction; otherwise Alembic connects to ``database_uri`` (or the
    configured database) itself.
    """

    if engine is None:
        command.upgrade(alembic_config(database_uri=database_uri or get_database_uri()), "head")
        return
    config = alembic_config()
    with engine.begin() as connection:
        config.attributes["connection"] = connection
        command.upgrade(config, "head")
    log.debug("Schema at head on %s", engine.url.render_as_string(hide_password=True))


def current_revision(engine: Engine) -> str | None:
    """Revision stamped on the database, ``None`` before the first upgrade."""

    with engine.connect() as connection:
        return MigrationContext.configure(connection).get_current_revision()
