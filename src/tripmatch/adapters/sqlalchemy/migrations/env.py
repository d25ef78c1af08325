"""Alembic environment for the correlation store."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from alembic import context
from sqlalchemy import create_engine, pool

from tripmatch.adapters.sqlalchemy.mappings import mapper_registry, start_mappers
from tripmatch.config import get_database_uri

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection

config = context.config

log = logging.getLogger("alembic.env")

start_mappers()

target_metadata = mapper_registry.metadata

# SQLite needs batch mode for ALTER TABLE
_OPTIONS = {"render_as_batch": True, "compare_type": True}


def _url() -> str:
    return config.get_main_option("sqlalchemy.url") or get_database_uri()


def _migrate(connection: Connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata, **_OPTIONS)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_offline() -> None:
    context.configure(url=_url(), target_metadata=target_metadata, literal_binds=True, **_OPTIONS)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    shared = config.attributes.get("connection")
    if shared is not None:
        _migrate(shared)
        return

    engine = create_engine(_url(), poolclass=pool.NullPool, future=True)
    try:
        with engine.connect() as connection:
            _migrate(connection)
    finally:
        engine.dispose()


if context.is_offline_mode():
    log.info("Rendering migrations as SQL")
    run_migrations_offline()
else:
    run_migrations_online()
