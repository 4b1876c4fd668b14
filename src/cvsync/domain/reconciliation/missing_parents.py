"""Two-phase resolution of parents referenced before they exist locally.

Phase 1 happens during term updates: ``ParentSync`` records
``accession -> {dependent term ids}`` on the run state instead of failing.
Phase 2 (``resolve``) runs after the update pass. It imports every recorded
accession from whichever configured ontology owns it and attaches it to its
dependents. Importing a parent may record further missing parents; they are
handled by the same loop, and every accession is imported at most once, so
chains of any length terminate. When an accession that already failed is
requested again, each waiting dependent is reported instead.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from cvsync.domain.model import CyclicParentError

from .errors import CvUpdateError, UpdateErrorKind
from .events import TermUpdated, UpdateError
from .importer import TermImporter

if TYPE_CHECKING:
    from uuid import UUID

    from cvsync.domain.model import Term
    from cvsync.domain.ports import TermRepository

    from .context import RunState
    from .events import EventBuffer
    from .sources import OntologyRegistry
    from .units import UnitRunner

log = getLogger(__name__)


@dataclass(slots=True)
class MissingParentResolver:
    sources: OntologyRegistry
    importer: TermImporter = field(default_factory=TermImporter)

    def resolve(self, run: RunState, units: UnitRunner) -> int:
        """Create and attach every queued parent; return the number of edges added."""

        attempted: set[str] = set()
        attached = 0
        while (entry := run.pop_missing_parent()) is not None:
            accession, dependents = entry
            first_attempt = accession not in attempted
            attempted.add(accession)

            def work(
                store: TermRepository,
                events: EventBuffer,
                accession: str = accession,
                dependents: set[UUID] = dependents,
                first_attempt: bool = first_attempt,
            ) -> int:
                return self._resolve_one(
                    accession,
                    dependents,
                    store=store,
                    events=events,
                    run=run,
                    may_import=first_attempt,
                )

            attached += units.run(work, accession=accession, state=run) or 0
        return attached

    def _resolve_one(
        self,
        accession: str,
        dependents: set[UUID],
        *,
        store: TermRepository,
        events: EventBuffer,
        run: RunState,
        may_import: bool,
    ) -> int:
        parent = store.get_by_identifier(accession)
        if parent is None and may_import:
            parent = self._import_parent(accession, store=store, events=events, run=run)

        attached = 0
        for dependent_id in sorted(dependents):
            child = store.get(dependent_id)
            if child is None:
                log.warning("Term %s waiting for %s no longer exists", dependent_id, accession)
                events.emit(
                    UpdateError(
                        kind=UpdateErrorKind.TERM_NOT_FOUND,
                        message=f"Term {dependent_id} waiting for parent {accession} is gone",
                        accession=accession,
                        term_id=dependent_id,
                    )
                )
                continue
            if parent is None:
                log.warning("Parent %s could not be created earlier; skipping", accession)
                events.emit(
                    UpdateError(
                        kind=UpdateErrorKind.IMPOSSIBLE_IMPORT,
                        message=(
                            f"{child.accession} cannot be attached to {accession}, "
                            "which failed to import earlier in this run"
                        ),
                        accession=child.accession,
                        term_id=child.id,
                    )
                )
                continue
            try:
                added = child.add_parent(parent)
            except CyclicParentError as exc:
                events.emit(
                    UpdateError(
                        kind=UpdateErrorKind.CYCLIC_PARENT,
                        message=str(exc),
                        accession=child.accession,
                        term_id=child.id,
                    )
                )
                continue
            if not added:
                continue
            log.info("Attached %s to missing parent %s", child.accession, accession)
            events.emit(
                TermUpdated(
                    accession=child.accession,
                    term_id=child.id,
                    short_label=child.short_label,
                    created_parents=(accession,),
                )
            )
            attached += 1
        return attached

    def _import_parent(
        self,
        accession: str,
        *,
        store: TermRepository,
        events: EventBuffer,
        run: RunState,
    ) -> Term:
        source = self.sources.source_for_accession(accession)
        snapshot = source.get_term(accession)
        if snapshot is None:
            raise CvUpdateError(
                UpdateErrorKind.NON_EXISTING_TERM,
                f"Missing parent {accession} is not in {source.ontology_id}",
                accession=accession,
            )
        return self.importer.import_term(
            snapshot,
            source=source,
            store=store,
            run=run,
            events=events,
        )
