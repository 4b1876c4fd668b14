"""Drives a full reconciliation run over one or more ontologies.

Responsibilities of this stage, per ontology:
1. update every local term mapped to the ontology, one unit of work per term
2. finish remaps that were deferred to another ontology during step 1
3. create parents that were referenced before they existed locally
4. optionally import ontology terms without a local counterpart, root down,
   again one unit of work per term
5. report local terms sharing an accession

A failing term never stops the run; it is reported as an ``UpdateError``.
Only ``StoreUnavailableError`` propagates to the caller.
"""

from __future__ import annotations

from contextlib import contextmanager
from functools import partial
from logging import getLogger
from typing import TYPE_CHECKING, Final

from .context import RunState, UpdateContext
from .errors import CvUpdateError, UpdateErrorKind
from .events import EventDispatcher, UpdateError
from .importer import TermImporter
from .kinds import KindResolver
from .listeners import ReportCollector
from .missing_parents import MissingParentResolver
from .remapper import ObsoleteRemapper, RemapOutcome
from .units import UnitRunner
from .updater import TermUpdater

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator
    from uuid import UUID

    from cvsync.domain.model import CrossReference, Term, TermSnapshot
    from cvsync.domain.ports import CvUnitOfWorkFactory, OntologySource, TermRepository

    from .events import EventBuffer, EventListener
    from .importer import ImportStep
    from .listeners import RunReport
    from .sources import OntologyRegistry

log = getLogger(__name__)

COOPERATIVE_INTERACTION_TERMS: Final[frozenset[str]] = frozenset(
    f"MI:{number:04d}" for number in range(1149, 1176) if number != 1151
)
DEFAULT_EXCLUDED_ROOTS: Final[frozenset[str]] = frozenset(
    {"MI:0000", *COOPERATIVE_INTERACTION_TERMS}
)


class ReconciliationOrchestrator:
    def __init__(
        self,
        sources: OntologyRegistry,
        unit_of_work_factory: CvUnitOfWorkFactory,
        *,
        updater: TermUpdater | None = None,
        remapper: ObsoleteRemapper | None = None,
        importer: TermImporter | None = None,
        resolver: MissingParentResolver | None = None,
        kinds: KindResolver | None = None,
        excluded_roots: Iterable[str] = DEFAULT_EXCLUDED_ROOTS,
        listeners: Iterable[EventListener] = (),
    ) -> None:
        self._sources = sources
        self._unit_of_work_factory = unit_of_work_factory
        self._kinds = kinds or KindResolver()
        self._updater = updater or TermUpdater()
        self._remapper = remapper or ObsoleteRemapper(sources)
        self._importer = importer or TermImporter(updater=self._updater, kinds=self._kinds)
        self._resolver = resolver or MissingParentResolver(sources, importer=self._importer)
        self._excluded_roots = frozenset(accession.upper() for accession in excluded_roots)
        self._events = EventDispatcher(list(listeners))
        self._units = UnitRunner(unit_of_work_factory, self._events)

    def subscribe(self, listener: EventListener) -> None:
        self._events.subscribe(listener)

    # Entry points -----------------------------------------------------------

    def run(
        self,
        ontology_ids: Iterable[str] | None = None,
        *,
        import_missing: bool = False,
    ) -> RunReport:
        """Reconcile every selected ontology and return the run's report.

        Unknown ontology ids raise ``KeyError`` before anything is touched.
        """

        selected = (
            list(self._sources.ontology_ids) if ontology_ids is None else list(ontology_ids)
        )
        sources = [self._sources.get(ontology_id) for ontology_id in selected]
        run = RunState(excluded_roots=self._excluded_roots)

        with self._collecting() as collector:
            for source in sources:
                self._reconcile_ontology(source, run, import_missing=import_missing)
        report = collector.report
        log.info(
            "Reconciliation finished: %d terms updated, %d created, %d merged, %d errors",
            report.updated_terms,
            report.created_terms,
            report.merged,
            len(report.errors),
        )
        return report

    def import_term(
        self,
        accession: str,
        *,
        ontology_id: str | None = None,
        include_children: bool = False,
    ) -> RunReport:
        """Create ``accession`` locally (and its missing descendants if asked)."""

        run = RunState(excluded_roots=self._excluded_roots)
        with self._collecting() as collector:
            work = partial(
                self._import_one,
                accession=accession,
                ontology_id=ontology_id,
                include_children=include_children,
                run=run,
            )
            found = self._units.run(work, accession=accession, state=run)
            if found is not None and include_children:
                source, snapshot = found
                created = self._import_subtree(snapshot, source, run)
                log.info("Imported %d terms below %s", created, accession)
            self._resolver.resolve(run, self._units)
        return collector.report

    # Steps ------------------------------------------------------------------

    def _reconcile_ontology(
        self,
        source: OntologySource,
        run: RunState,
        *,
        import_missing: bool,
    ) -> None:
        log.info("Reconciling ontology %s", source.ontology_id)

        term_ids = self._local_term_ids(source)
        log.info("%d local terms mapped to %s", len(term_ids), source.ontology_id)
        for term_id in term_ids:
            work = partial(self._update_term, term_id=term_id, source=source, run=run)
            self._units.run(work, term_id=term_id, state=run)

        self._complete_deferred_remaps(run)

        attached = self._resolver.resolve(run, self._units)
        log.info("Attached %d parent edges for %s", attached, source.ontology_id)

        if import_missing:
            self._import_missing_terms(source, run)
            self._resolver.resolve(run, self._units)

        self._report_duplicates(source)

    def _local_term_ids(self, source: OntologySource) -> list[UUID]:
        with self._unit_of_work_factory() as uow:
            return uow.repositories.terms.term_ids_for_ontology(
                database=source.database,
                prefix=f"{source.ontology_id}:",
            )

    def _update_term(
        self,
        store: TermRepository,
        events: EventBuffer,
        *,
        term_id: UUID,
        source: OntologySource,
        run: RunState,
    ) -> None:
        term = store.get(term_id)
        if term is None:
            log.debug("Term %s disappeared before its update", term_id)
            return

        identifier, identity = self._resolve_identifier(term, source)
        if run.is_processed(identifier):
            log.debug("%s already processed in this run", identifier)
            return

        snapshot = source.get_term(identifier)
        if snapshot is None:
            raise CvUpdateError(
                UpdateErrorKind.NON_EXISTING_TERM,
                f"{identifier} does not exist in {source.ontology_id}",
                accession=identifier,
                term_id=term.id,
            )
        self._check_kind(term, snapshot, source, identifier)

        context = UpdateContext(
            term=term,
            snapshot=snapshot,
            source=source,
            store=store,
            run=run,
            events=events,
            identifier=identifier,
            identity_xref=identity,
        )
        if context.obsolete:
            outcome = self._remapper.remap(context)
            if not outcome.continues_update:
                return
        self._updater.update(context)

    def _resolve_identifier(
        self,
        term: Term,
        source: OntologySource,
    ) -> tuple[str, CrossReference | None]:
        identities = term.identity_xrefs(source.database)
        if len(identities) > 1:
            ids = ", ".join(sorted(xref.primary_id for xref in identities))
            raise CvUpdateError(
                UpdateErrorKind.MULTI_IDENTITIES,
                f"{term.short_label} has several {source.database} identities: {ids}",
                accession=term.accession,
                term_id=term.id,
            )
        identity = identities[0] if identities else None
        identifier = identity.primary_id if identity is not None else term.accession
        if not identifier:
            raise CvUpdateError(
                UpdateErrorKind.NULL_IDENTIFIER,
                f"{term.short_label} has no {source.ontology_id} identifier",
                term_id=term.id,
            )
        return identifier, identity

    def _check_kind(
        self,
        term: Term,
        snapshot: TermSnapshot,
        source: OntologySource,
        identifier: str,
    ) -> None:
        # Obsolete terms are detached from their branch in most ontologies.
        if source.is_obsolete(snapshot):
            return
        kinds = self._kinds.kinds_for(snapshot, source)
        if not kinds:
            raise CvUpdateError(
                UpdateErrorKind.KIND_NOT_FOUND,
                f"No term kind is known for the ancestors of {identifier}",
                accession=identifier,
                term_id=term.id,
            )
        if term.kind not in kinds:
            raise CvUpdateError(
                UpdateErrorKind.INVALID_KIND,
                f"{identifier} is stored as {term.kind} but belongs to "
                f"{', '.join(sorted(kinds))}",
                accession=identifier,
                term_id=term.id,
            )

    def _complete_deferred_remaps(self, run: RunState) -> None:
        for target, term_ids in run.pop_deferred_remaps():
            for term_id in sorted(term_ids):
                work = partial(self._remap_across, term_id=term_id, target=target, run=run)
                self._units.run(work, accession=target, term_id=term_id, state=run)

    def _remap_across(
        self,
        store: TermRepository,
        events: EventBuffer,
        *,
        term_id: UUID,
        target: str,
        run: RunState,
    ) -> None:
        term = store.get(term_id)
        if term is None:
            log.debug("Term %s disappeared before its deferred remap", term_id)
            return

        source = self._sources.source_for_accession(target)
        replacement = source.get_term(target)
        if replacement is None:
            raise CvUpdateError(
                UpdateErrorKind.NON_EXISTING_TERM,
                f"{term.accession} is remapped to {target}, which is not in "
                f"{source.ontology_id}",
                accession=term.accession,
                term_id=term.id,
            )

        identity = next(
            (xref for xref in term.identity_xrefs() if term.matches_accession(xref.primary_id)),
            None,
        )
        context = UpdateContext(
            term=term,
            snapshot=replacement,
            source=source,
            store=store,
            run=run,
            events=events,
            identifier=term.accession or target,
            identity_xref=identity,
        )
        outcome = self._remapper.remap_to(context, replacement)
        if outcome is RemapOutcome.REPOINTED:
            self._updater.update(context)

    def _import_missing_terms(self, source: OntologySource, run: RunState) -> None:
        for root in self._import_roots(source, run):
            created = self._import_subtree(root, source, run)
            if created:
                log.info("Imported %d terms below %s", created, root.accession)

    def _import_roots(self, source: OntologySource, run: RunState) -> list[TermSnapshot]:
        """Non-obsolete roots, replacing an excluded root by its children."""

        roots: list[TermSnapshot] = []
        for root in source.get_root_terms():
            if run.is_excluded(root.accession):
                candidates = source.get_direct_children(root)
            else:
                candidates = (root,)
            roots.extend(
                candidate
                for candidate in candidates
                if not run.is_excluded(candidate.accession) and not source.is_obsolete(candidate)
            )
        return sorted(roots, key=lambda snapshot: snapshot.accession)

    def _import_subtree(self, root: TermSnapshot, source: OntologySource, run: RunState) -> int:
        """Import ``root`` and its missing descendants, one unit of work per term.

        A term that fails is reported under its own accession and its
        children are not visited; the rest of the subtree still is.
        """

        created = 0
        seen: set[str] = set()
        pending = [root]
        while pending:
            snapshot = pending.pop()
            key = snapshot.accession.upper()
            if key in seen or run.is_excluded(key) or source.is_obsolete(snapshot):
                continue
            seen.add(key)
            work = partial(self._import_node, snapshot=snapshot, source=source, run=run)
            step = self._units.run(work, accession=snapshot.accession, state=run)
            if step is None:
                continue
            created += step.created
            pending.extend(step.children)
        return created

    def _import_node(
        self,
        store: TermRepository,
        events: EventBuffer,
        *,
        snapshot: TermSnapshot,
        source: OntologySource,
        run: RunState,
    ) -> ImportStep:
        return self._importer.import_node(
            snapshot,
            source=source,
            store=store,
            run=run,
            events=events,
        )

    def _import_one(
        self,
        store: TermRepository,
        events: EventBuffer,
        *,
        accession: str,
        ontology_id: str | None,
        include_children: bool,
        run: RunState,
    ) -> tuple[OntologySource, TermSnapshot]:
        source = (
            self._sources.get(ontology_id)
            if ontology_id is not None
            else self._sources.source_for_accession(accession)
        )
        snapshot = source.get_term(accession)
        if snapshot is None:
            raise CvUpdateError(
                UpdateErrorKind.NON_EXISTING_TERM,
                f"{accession} does not exist in {source.ontology_id}",
                accession=accession,
            )
        if source.is_obsolete(snapshot):
            raise CvUpdateError(
                UpdateErrorKind.IMPOSSIBLE_IMPORT,
                f"{accession} is obsolete in {source.ontology_id} and is not imported",
                accession=accession,
            )
        # With children, the caller walks the subtree term by term.
        if include_children:
            return source, snapshot
        if store.get_by_identifier(accession) is not None:
            log.info("%s already exists locally", accession)
        else:
            self._importer.import_term(snapshot, source=source, store=store, run=run, events=events)
        return source, snapshot

    def _report_duplicates(self, source: OntologySource) -> None:
        with self._unit_of_work_factory() as uow:
            groups = uow.repositories.terms.find_duplicates(prefix=f"{source.ontology_id}:")
        for group in groups:
            log.warning("%d local terms share %s", len(group.term_ids), group.accession)
            self._events.emit(
                UpdateError(
                    kind=UpdateErrorKind.DUPLICATED_TERM,
                    message=(
                        f"{len(group.term_ids)} local terms share {group.accession} "
                        f"in {source.ontology_id}"
                    ),
                    accession=group.accession,
                )
            )

    @contextmanager
    def _collecting(self) -> Iterator[ReportCollector]:
        collector = ReportCollector()
        self._events.subscribe(collector)
        try:
            yield collector
        finally:
            self._events.unsubscribe(collector)
