from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker

from cvsync.adapters.sqlalchemy import start_mappers
from cvsync.adapters.sqlalchemy.migrations import upgrade_head
from cvsync.adapters.sqlalchemy.unit_of_work import SqlAlchemyCvUnitOfWork, shutdown, startup
from cvsync.config.http_resilience import ResilienceConfig, RetryPolicy
from cvsync.config.ols import DEFAULT_OLS_ONTOLOGIES, OlsConfig, OlsOntologyConfig
from tests.support.cv_terms import FakeUnitOfWork, InMemoryTermStore

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


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
    session_factory = sessionmaker(bind=sqlite_engine, future=True)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyCvUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyCvUnitOfWork:
        return SqlAlchemyCvUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()


@pytest.fixture
def term_store() -> InMemoryTermStore:
    return InMemoryTermStore()


@pytest.fixture
def fake_unit_of_work(term_store: InMemoryTermStore) -> Callable[[], FakeUnitOfWork]:
    def factory() -> FakeUnitOfWork:
        return FakeUnitOfWork(term_store)

    return factory


@pytest.fixture
def mi_ontology() -> OlsOntologyConfig:
    return DEFAULT_OLS_ONTOLOGIES[0]


@pytest.fixture
def ols_config() -> OlsConfig:
    return OlsConfig(
        resilience=ResilienceConfig(
            name="ols-test",
            base_url="https://ols.test/api/",
            retry=RetryPolicy(total=0),
            cache=None,
        ),
        page_size=2,
    )
