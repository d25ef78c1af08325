"""SQLAlchemy unit of work over the correlation store.

``startup()`` binds one engine per process and brings its schema to head. Each
``SqlAlchemyUnitOfWork`` then opens a short-lived session from that engine.
Leaving the ``with`` block closes the session; only an explicit ``commit()``
makes changes durable, and an exception rolls everything back.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from tripmatch.adapters.sqlalchemy.mappings import start_mappers
from tripmatch.adapters.sqlalchemy.migrations import upgrade_head
from tripmatch.adapters.sqlalchemy.repositories import (
    SqlAlchemyAliasRepository,
    SqlAlchemyAuditLogRepository,
    SqlAlchemyCorrelationRepository,
)
from tripmatch.config.storage import get_database_uri
from tripmatch.domain.ports.unit_of_work import CorrelationRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the store is used before ``startup()`` or outside a ``with`` block."""


@dataclass(slots=True)
class _StoreState:
    engine: Engine | None = None
    session_factory: sessionmaker[Session] | None = None

    def bind(self, engine: Engine | None) -> None:
        self.engine = engine
        self.session_factory = (
            None if engine is None else sessionmaker(bind=engine, expire_on_commit=False)
        )

    def require_session_factory(self) -> sessionmaker[Session]:
        if self.session_factory is None:
            raise StartupError(
                "Correlation store not started. Call "
                "tripmatch.adapters.sqlalchemy.unit_of_work.startup() first."
            )
        return self.session_factory


_STATE = _StoreState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
    migrate: bool = True,
) -> None:
    """Bind the store to ``engine``, or to a new engine for ``database_uri``.

    The configured ``DATABASE_URI`` (or the SQLite file in the data directory) is
    used when neither is given. Rebinding an already started store requires
    ``force=True``.
    """

    if _STATE.engine is not None and not force:
        raise StartupError("Correlation store already started. Pass force=True to rebind.")

    bound = engine or create_engine(database_uri or get_database_uri(), future=True)
    start_mappers()
    if migrate:
        upgrade_head(engine=bound)
    _STATE.bind(bound)
    log.info("Correlation store bound to %s", bound.url.render_as_string(hide_password=True))


def configured_engine() -> Engine | None:
    return _STATE.engine


def is_started() -> bool:
    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the bound engine and forget it."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.bind(None)


class SqlAlchemyUnitOfWork:
    """One session with the alias, correlation and audit repositories bound to it."""

    def __init__(self) -> None:
        self._session_factory = _STATE.require_session_factory()
        self._session: Session | None = None
        self._repositories: CorrelationRepositories | None = None

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work is already open")
        session = self._session_factory()
        self._session = session
        self._repositories = CorrelationRepositories(
            aliases=SqlAlchemyAliasRepository(session),
            correlations=SqlAlchemyCorrelationRepository(session),
            audit_log=SqlAlchemyAuditLogRepository(session),
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self.session
        try:
            if exc_type is not None:
                session.rollback()
        finally:
            session.close()
            self._session = None
            self._repositories = None
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work is not open")
        return self._session

    @property
    def repositories(self) -> CorrelationRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work is not open")
        return self._repositories

    def flush(self) -> None:
        self.session.flush()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


if TYPE_CHECKING:
    from tripmatch.domain.ports.unit_of_work import CorrelationUnitOfWork

    _uow_check: CorrelationUnitOfWork = SqlAlchemyUnitOfWork()
