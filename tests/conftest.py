from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker

from tripmatch.adapters.sqlalchemy import start_mappers
from tripmatch.adapters.sqlalchemy.migrations import upgrade_head
from tripmatch.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, shutdown, startup
from tripmatch.config import MatchingConfig
from tripmatch.domain.resolution import NameResolver
from tests.helpers.correlations import FakeAliasRepository, FakeUnitOfWork, kcgm_aliases

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


@pytest.fixture
def matching_config() -> MatchingConfig:
    return MatchingConfig()


@pytest.fixture
def kcgm_resolver() -> NameResolver:
    return NameResolver(FakeAliasRepository(kcgm_aliases()))


@pytest.fixture
def fake_unit_of_work() -> FakeUnitOfWork:
    return FakeUnitOfWork(aliases=FakeAliasRepository(kcgm_aliases()))


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    start_mappers()
    upgrade_head(engine=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, future=True, expire_on_commit=False)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()
