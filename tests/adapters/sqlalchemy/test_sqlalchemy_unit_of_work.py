from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import uuid4

import pytest
from sqlalchemy import create_engine, insert
from sqlalchemy.exc import OperationalError

from cvsync.adapters.sqlalchemy.mappings import term_usage_table
from cvsync.adapters.sqlalchemy.migrations import current_revision
from cvsync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyCvUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)
from cvsync.config.storage import DatabaseConfig
from cvsync.domain.model import ReferenceKind, TermKind
from cvsync.domain.ports import StoreUnavailableError
from cvsync.domain.reconciliation import ReconciliationOrchestrator, UpdateErrorKind
from tests.support.cv_terms import make_term, mi_snapshot, mi_source, registry_of

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from sqlalchemy.engine import Engine


@pytest.fixture(autouse=True)
def reset_unit_of_work_state() -> Iterator[None]:
    shutdown()
    yield
    shutdown()


def test_unit_of_work_requires_startup() -> None:
    assert not is_started()
    with pytest.raises(StartupError):
        SqlAlchemyCvUnitOfWork()


def test_startup_requires_force_for_reconfiguration() -> None:
    engine_a = create_engine("sqlite+pysqlite:///:memory:", future=True)
    engine_b = create_engine("sqlite+pysqlite:///:memory:", future=True)

    startup(engine=engine_a, force=True)

    with pytest.raises(StartupError):
        startup(engine=engine_b)

    startup(engine=engine_b, force=True)
    assert configured_engine() is engine_b
    assert current_revision(engine_b) == "0001"


def test_startup_builds_engine_from_database_config() -> None:
    startup(database=DatabaseConfig(uri="sqlite+pysqlite:///:memory:", echo=True))

    engine = configured_engine()
    assert engine is not None
    assert engine.echo is True
    assert current_revision(engine) == "0001"


def test_unit_of_work_persists_terms(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    parent = make_term("MI:0190", "interaction type")
    child = make_term("MI:0407", "direct interaction")
    child.add_parent(parent)

    with SqlAlchemyCvUnitOfWork() as uow:
        uow.repositories.terms.add(parent)
        uow.repositories.terms.add(child)
        uow.commit()

    with SqlAlchemyCvUnitOfWork() as uow:
        loaded = uow.repositories.terms.get_by_identifier("MI:0407")
        assert loaded is not None
        assert loaded is not child
        assert [p.accession for p in loaded.parents] == ["MI:0190"]
        assert [x.primary_id for x in loaded.identity_xrefs("psi-mi")] == ["MI:0407"]


def test_failed_unit_is_rolled_back(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    with pytest.raises(RuntimeError), SqlAlchemyCvUnitOfWork() as uow:
        uow.repositories.terms.add(make_term("MI:0407", "direct interaction"))
        uow.session.flush()
        raise RuntimeError("boom")

    with SqlAlchemyCvUnitOfWork() as uow:
        assert uow.repositories.terms.get_by_identifier("MI:0407") is None


def test_connection_failures_surface_as_store_unavailable(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    with pytest.raises(StoreUnavailableError) as excinfo, SqlAlchemyCvUnitOfWork():
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    assert isinstance(excinfo.value.__cause__, OperationalError)


def test_repositories_require_an_open_unit(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    with pytest.raises(StartupError):
        _ = SqlAlchemyCvUnitOfWork().repositories


def test_reconciliation_over_sqlite(
    sqlite_unit_of_work: Callable[[], SqlAlchemyCvUnitOfWork],
) -> None:
    pim = TermKind.PARTICIPANT_IDENTIFICATION_METHOD
    source = mi_source(
        mi_snapshot("MI:0002", "participant identification method", "MI:0000"),
        mi_snapshot("MI:0102", "sequence tag", "MI:0002"),
        mi_snapshot("MI:0101", "old sequence tag", obsolete=True, remapped_to="MI:0102"),
    )
    old = make_term("MI:0101", "old sequence tag", kind=pim)
    with sqlite_unit_of_work() as uow:
        uow.repositories.terms.add(old)
        uow.repositories.terms.add(make_term("MI:0102", "sequence tag", kind=pim))
        uow.repositories.terms.add(make_term("MI:0407", "direct interactn"))
        uow.session.flush()
        uow.session.execute(
            insert(term_usage_table),
            [
                {
                    "reference_kind": ReferenceKind.PARTICIPANT_IDENTIFICATION_METHOD,
                    "owner_id": uuid4(),
                    "term_id": old.id,
                }
                for _ in range(5)
            ],
        )
        uow.commit()
    orchestrator = ReconciliationOrchestrator(registry_of(source), sqlite_unit_of_work)

    report = orchestrator.run(["MI"])

    assert report.errors_of(UpdateErrorKind.FATAL) == []
    assert report.errors == []
    assert (report.merged, report.repointed_references) == (1, 5)
    with sqlite_unit_of_work() as uow:
        terms = uow.repositories.terms
        assert terms.get(old.id) is None
        target = terms.get_by_identifier("MI:0102")
        assert target is not None
        assert terms.count_references(target) == 5
        assert [parent.accession for parent in target.parents] == ["MI:0002"]
        interaction = terms.get_by_identifier("MI:0407")
        assert interaction is not None
        assert interaction.short_label == "direct interaction"
        assert [parent.accession for parent in interaction.parents] == ["MI:0190"]

    second = orchestrator.run(["MI"])

    assert (second.updated_terms, second.created_terms, second.errors) == (0, 0, [])
