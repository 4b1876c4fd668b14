from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from cvsync.adapters.memory import InMemoryOntologySource
from cvsync.domain.model import CrossReference, Qualifier, ReferenceKind, TermKind
from cvsync.domain.ports import StoreUnavailableError
from cvsync.domain.reconciliation import (
    ReconciliationOrchestrator,
    TermCreated,
    UpdateError,
    UpdateErrorKind,
)
from tests.support.cv_terms import (
    MI_PATTERN,
    InMemoryTermStore,
    UnavailableUnitOfWork,
    make_term,
    mi_branch,
    mi_snapshot,
    mi_source,
    mod_source,
    registry_of,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from cvsync.domain.model import Term, TermSnapshot
    from cvsync.domain.reconciliation import CvUpdateEvent
    from tests.support.cv_terms import FakeUnitOfWork

    UnitOfWorkFactory = Callable[[], FakeUnitOfWork]

PIM = TermKind.PARTICIPANT_IDENTIFICATION_METHOD


def _orchestrator(
    factory: UnitOfWorkFactory,
    *sources: InMemoryOntologySource,
    listeners: list[Callable[[CvUpdateEvent], None]] | None = None,
) -> ReconciliationOrchestrator:
    return ReconciliationOrchestrator(
        registry_of(*(sources or (mi_source(),))),
        factory,
        listeners=listeners or [],
    )


def _local(store: InMemoryTermStore, accession: str) -> Term:
    term = store.get_by_identifier(accession)
    assert term is not None
    return term


def test_run_updates_local_terms(
    term_store: InMemoryTermStore, fake_unit_of_work: UnitOfWorkFactory
) -> None:
    term_store.add(make_term("MI:0190", "interaction type"))
    term_store.add(make_term("MI:0407", "direct interactn"))

    report = _orchestrator(fake_unit_of_work).run(["MI"])

    assert report.updated_terms == 1
    assert report.errors == []
    term = _local(term_store, "MI:0407")
    assert term.short_label == "direct interaction"
    assert term.parents == (_local(term_store, "MI:0190"),)


def test_failing_term_does_not_stop_the_run(
    term_store: InMemoryTermStore, fake_unit_of_work: UnitOfWorkFactory
) -> None:
    term_store.add(make_term("MI:0208", "genetic", kind=TermKind.TOPIC))
    term_store.add(make_term("MI:0407", "direct interactn"))
    term_store.add(make_term("MI:9999", "withdrawn"))

    report = _orchestrator(fake_unit_of_work).run()

    assert [error.kind for error in report.errors] == [
        UpdateErrorKind.INVALID_KIND,
        UpdateErrorKind.NON_EXISTING_TERM,
    ]
    assert [error.accession for error in report.errors] == ["MI:0208", "MI:9999"]
    assert _local(term_store, "MI:0208").short_label == "genetic"
    assert _local(term_store, "MI:0407").short_label == "direct interaction"


def test_events_of_failed_units_are_never_published(
    term_store: InMemoryTermStore, fake_unit_of_work: UnitOfWorkFactory
) -> None:
    term = make_term("MI:0407", "direct interaction")
    term.add_xref(
        CrossReference(database="psi-mi", qualifier=Qualifier.IDENTITY, primary_id="MI:0915")
    )
    term_store.add(term)
    published: list[CvUpdateEvent] = []

    _orchestrator(fake_unit_of_work, listeners=[published.append]).run()

    [event] = published
    assert isinstance(event, UpdateError)
    assert event.kind is UpdateErrorKind.MULTI_IDENTITIES


def test_second_run_changes_nothing(
    term_store: InMemoryTermStore, fake_unit_of_work: UnitOfWorkFactory
) -> None:
    term_store.add(make_term("MI:0407", "direct interaction", identity=False))
    orchestrator = _orchestrator(fake_unit_of_work)

    first = orchestrator.run(import_missing=True)
    second = orchestrator.run(import_missing=True)

    assert first.updated_terms >= 1
    assert first.created_terms == 5
    assert (second.updated_terms, second.created_terms, second.errors) == (0, 0, [])


def test_missing_terms_are_imported_from_branch_roots(
    term_store: InMemoryTermStore, fake_unit_of_work: UnitOfWorkFactory
) -> None:
    report = _orchestrator(fake_unit_of_work).run(import_missing=True)

    assert report.created_terms == 6
    assert report.errors == []
    assert _local(term_store, "MI:0664").kind is TermKind.TOPIC
    assert _local(term_store, "MI:0915").parents == (_local(term_store, "MI:0190"),)
    assert term_store.get_by_identifier("MI:0000") is None


def test_shared_accessions_are_reported(
    term_store: InMemoryTermStore, fake_unit_of_work: UnitOfWorkFactory
) -> None:
    term_store.add(make_term("MI:0407", "direct interaction"))
    term_store.add(make_term("MI:0407", "direct interaction copy"))

    report = _orchestrator(fake_unit_of_work).run()

    [duplicate] = report.errors_of(UpdateErrorKind.DUPLICATED_TERM)
    assert duplicate.accession == "MI:0407"


def test_obsolete_term_is_merged_into_its_replacement(
    term_store: InMemoryTermStore, fake_unit_of_work: UnitOfWorkFactory
) -> None:
    source = mi_source(
        mi_snapshot("MI:0002", "participant identification method", "MI:0000"),
        mi_snapshot("MI:0102", "sequence tag", "MI:0002"),
        mi_snapshot("MI:0101", "old sequence tag", obsolete=True, remapped_to="MI:0102"),
    )
    old = make_term("MI:0101", "old sequence tag", kind=PIM)
    term_store.add(old)
    term_store.add(make_term("MI:0102", "sequence tag", kind=PIM))
    term_store.use(ReferenceKind.EXPERIMENT_IDENTIFICATION_METHOD, old, times=3)
    term_store.use(ReferenceKind.PARTICIPANT_IDENTIFICATION_METHOD, old, times=2)

    report = _orchestrator(fake_unit_of_work, source).run()

    assert report.errors == []
    assert (report.merged, report.repointed_references) == (1, 5)
    assert term_store.get(old.id) is None
    target = _local(term_store, "MI:0102")
    assert term_store.usages_of(target) == 5
    assert target.parents == (_local(term_store, "MI:0002"),)


def test_remap_into_another_ontology_waits_for_that_ontology(
    term_store: InMemoryTermStore, fake_unit_of_work: UnitOfWorkFactory
) -> None:
    mi = mi_source(mi_snapshot("MI:0101", "acetylation", obsolete=True, remapped_to="MOD:00001"))
    mod = mod_source(
        mi_snapshot("MOD:00000", "protein modification"),
        mi_snapshot("MOD:00001", "acetylated residue", "MOD:00000"),
    )
    term_store.add(make_term("MI:0101", "acetylation", kind=TermKind.FEATURE_TYPE))

    report = _orchestrator(fake_unit_of_work, mi, mod).run(["MI"])

    assert report.errors == []
    assert report.remapped == 1
    term = _local(term_store, "MOD:00001")
    assert [xref.database for xref in term.identity_xrefs()] == ["psi-mod"]
    assert [
        (xref.database, xref.primary_id)
        for xref in term.xrefs
        if xref.qualifier == Qualifier.SECONDARY_AC
    ] == [("psi-mi", "MI:0101")]
    assert term.parents == (_local(term_store, "MOD:00000"),)


def test_remap_into_unknown_namespace_is_reported(
    term_store: InMemoryTermStore, fake_unit_of_work: UnitOfWorkFactory
) -> None:
    mi = mi_source(mi_snapshot("MI:0101", "old", obsolete=True, remapped_to="XYZ:0001"))
    term_store.add(make_term("MI:0101", "old"))

    report = _orchestrator(fake_unit_of_work, mi).run()

    [error] = report.errors
    assert error.kind == "ontology_database_no_found"
    term = _local(term_store, "MI:0101")
    assert not term.obsolete
    assert term.remapped_to is None


def test_unknown_ontology_is_rejected_up_front(
    fake_unit_of_work: UnitOfWorkFactory,
) -> None:
    with pytest.raises(KeyError):
        _orchestrator(fake_unit_of_work).run(["GO"])


def test_unreachable_store_aborts_the_run(term_store: InMemoryTermStore) -> None:
    orchestrator = _orchestrator(lambda: UnavailableUnitOfWork(term_store))

    with pytest.raises(StoreUnavailableError):
        orchestrator.run()


def test_import_term_creates_missing_parents(
    term_store: InMemoryTermStore, fake_unit_of_work: UnitOfWorkFactory
) -> None:
    published: list[CvUpdateEvent] = []

    report = _orchestrator(fake_unit_of_work, listeners=[published.append]).import_term(
        "MI:0407"
    )

    assert report.created_terms == 2
    assert [event.accession for event in published if isinstance(event, TermCreated)] == [
        "MI:0407",
        "MI:0190",
    ]
    assert _local(term_store, "MI:0407").parents == (_local(term_store, "MI:0190"),)


def test_import_term_with_children(
    term_store: InMemoryTermStore, fake_unit_of_work: UnitOfWorkFactory
) -> None:
    report = _orchestrator(fake_unit_of_work).import_term("MI:0190", include_children=True)

    assert report.created_terms == 4
    assert len(term_store.terms) == 4


def test_obsolete_term_is_not_imported(
    term_store: InMemoryTermStore, fake_unit_of_work: UnitOfWorkFactory
) -> None:
    mi = mi_source(mi_snapshot("MI:0101", "old", "MI:0190", obsolete=True))

    report = _orchestrator(fake_unit_of_work, mi).import_term("MI:0101", ontology_id="MI")

    [error] = report.errors
    assert error.kind is UpdateErrorKind.IMPOSSIBLE_IMPORT
    assert term_store.terms == []


class _BrokenChildrenSource(InMemoryOntologySource):
    """MI source whose children lookup fails for one term."""

    broken = "MI:0208"

    def get_direct_children(self, term: TermSnapshot) -> tuple[TermSnapshot, ...]:
        if term.accession == self.broken:
            raise RuntimeError(f"children of {term.accession} unavailable")
        return super().get_direct_children(term)


def _broken_source(*extra: TermSnapshot) -> _BrokenChildrenSource:
    return _BrokenChildrenSource("MI", "psi-mi", MI_PATTERN, [*mi_branch(), *extra])


def _parent_accessions(term: Term) -> set[str | None]:
    return {parent.accession for parent in term.parents}


def test_import_subtree_skips_existing_and_obsolete_terms(
    term_store: InMemoryTermStore, fake_unit_of_work: UnitOfWorkFactory
) -> None:
    source = mi_source(
        mi_snapshot("MI:0409", "withdrawn", "MI:0190", obsolete=True),
        mi_snapshot("MI:0410", "under withdrawn", "MI:0409"),
        mi_snapshot("MI:0411", "under direct", "MI:0407"),
    )
    term_store.add(make_term("MI:0407", "direct interaction"))

    report = _orchestrator(fake_unit_of_work, source).import_term(
        "MI:0190", include_children=True
    )

    assert report.errors == []
    assert report.created_terms == 4
    assert sorted(term.accession or "" for term in term_store.terms) == [
        "MI:0190",
        "MI:0208",
        "MI:0407",
        "MI:0411",
        "MI:0915",
    ]
    assert _local(term_store, "MI:0411").parents == (_local(term_store, "MI:0407"),)


def test_failing_descendant_does_not_roll_back_its_siblings(
    term_store: InMemoryTermStore, fake_unit_of_work: UnitOfWorkFactory
) -> None:
    source = _broken_source(
        mi_snapshot("MI:0900", "p-loop binding", "MI:0190"),
        mi_snapshot("MI:0950", "tandem binding", "MI:0190", "MI:0900"),
    )

    report = _orchestrator(fake_unit_of_work, source).run(import_missing=True)

    [error] = report.errors
    assert error.kind is UpdateErrorKind.FATAL
    assert error.accession == "MI:0208"
    assert report.created_terms == 7
    assert term_store.get_by_identifier("MI:0208") is None
    for accession in ("MI:0190", "MI:0407", "MI:0900", "MI:0915", "MI:0664"):
        _local(term_store, accession)
    assert _parent_accessions(_local(term_store, "MI:0950")) == {"MI:0190", "MI:0900"}


def test_term_rolled_back_during_import_is_recreated_in_full(
    term_store: InMemoryTermStore, fake_unit_of_work: UnitOfWorkFactory
) -> None:
    source = _broken_source(
        mi_snapshot("MI:0900", "p-loop binding", "MI:0190"),
        mi_snapshot("MI:0950", "tandem binding", "MI:0190", "MI:0900"),
        mi_snapshot("MI:0960", "genetic suppression", "MI:0190", "MI:0208"),
    )

    report = _orchestrator(fake_unit_of_work, source).run(import_missing=True)

    assert [(error.kind, error.accession) for error in report.errors] == [
        (UpdateErrorKind.FATAL, "MI:0208")
    ]
    genetic = _local(term_store, "MI:0208")
    assert [xref.primary_id for xref in genetic.identity_xrefs("psi-mi")] == ["MI:0208"]
    assert genetic.parents == (_local(term_store, "MI:0190"),)
    assert _parent_accessions(_local(term_store, "MI:0960")) == {"MI:0190", "MI:0208"}
    assert report.created_terms == 9
