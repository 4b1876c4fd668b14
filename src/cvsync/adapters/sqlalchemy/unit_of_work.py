"""SQLAlchemy units of work over the local term store.

The adapter keeps one engine per process. ``startup()`` builds it (or takes
one from the caller), brings the schema to head and makes
``SqlAlchemyCvUnitOfWork`` usable; ``shutdown()`` disposes it again.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.exc import DBAPIError, DisconnectionError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session, sessionmaker

from cvsync.adapters.sqlalchemy.mappings import start_mappers
from cvsync.adapters.sqlalchemy.migrations import upgrade_head
from cvsync.adapters.sqlalchemy.repositories import SqlAlchemyTermRepository
from cvsync.config.storage import get_database_config
from cvsync.domain.ports import CvRepositories, StoreUnavailableError

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

    from cvsync.config.storage import DatabaseConfig

log = getLogger(__name__)

_UNAVAILABLE = (DisconnectionError, PoolTimeoutError, OperationalError)


class StartupError(RuntimeError):
    """Raised when the adapter is used before ``startup()`` or started twice."""


_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def build_engine(config: DatabaseConfig) -> Engine:
    options: dict[str, object] = {"echo": config.echo, "future": True}
    if not config.is_sqlite:
        # Server connections can be dropped while a term waits on OLS.
        options["pool_pre_ping"] = True
    return create_engine(config.uri, **options)


def startup(
    *,
    engine: Engine | None = None,
    database: DatabaseConfig | None = None,
    force: bool = False,
) -> None:
    """Bind the adapter to ``engine`` (or one built from ``database``) at schema head."""

    global _engine, _session_factory  # noqa: PLW0603
    if _engine is not None and not force:
        raise StartupError("SQLAlchemy adapter already started; pass force=True to rebind it")

    bound = engine or build_engine(database or get_database_config())
    start_mappers()
    upgrade_head(engine=bound)
    _engine = bound
    _session_factory = sessionmaker(bind=bound, expire_on_commit=False)
    log.debug("Term store ready on %s", bound.url.render_as_string(hide_password=True))


def configured_engine() -> Engine | None:
    return _engine


def is_started() -> bool:
    return _engine is not None


def shutdown() -> None:
    global _engine, _session_factory  # noqa: PLW0603
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


def _store_unavailable(exc: BaseException) -> bool:
    if isinstance(exc, _UNAVAILABLE):
        return True
    return isinstance(exc, DBAPIError) and exc.connection_invalidated


class SqlAlchemyCvUnitOfWork:
    """One transaction over the term store, usually covering a single term.

    Leaving the block with an exception rolls back. Connection-level failures
    are re-raised as ``StoreUnavailableError`` so the orchestrator can abort
    the run instead of blaming the term.
    """

    def __init__(self) -> None:
        if _session_factory is None:
            raise StartupError(
                "SQLAlchemy adapter not started; call "
                "cvsync.adapters.sqlalchemy.unit_of_work.startup() first"
            )
        self._session_factory = _session_factory
        self._session: Session | None = None
        self._repositories: CvRepositories | None = None

    def __enter__(self) -> SqlAlchemyCvUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work already open")
        self._session = self._session_factory()
        self._repositories = CvRepositories(terms=SqlAlchemyTermRepository(self._session))
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
            session.close()
        finally:
            self._session = None
            self._repositories = None
        if exc_value is not None and _store_unavailable(exc_value):
            raise StoreUnavailableError(f"Term store unavailable: {exc_value}") from exc_value
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work is not open")
        return self._session

    @property
    def repositories(self) -> CvRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work is not open")
        return self._repositories

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


if TYPE_CHECKING:
    from cvsync.domain.ports import CvUnitOfWork

    _uow_cv_check: CvUnitOfWork = SqlAlchemyCvUnitOfWork()
