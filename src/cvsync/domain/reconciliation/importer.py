"""Creation of local terms for ontology terms without a local counterpart."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from cvsync.domain.model import Term

from .context import UpdateContext
from .errors import CvUpdateError, UpdateErrorKind
from .events import TermCreated
from .kinds import KindResolver
from .labels import unique_short_label
from .updater import TermUpdater

if TYPE_CHECKING:
    from cvsync.domain.model import TermKind, TermSnapshot
    from cvsync.domain.ports import OntologySource, TermRepository

    from .context import RunState
    from .events import EventSink

log = getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ImportStep:
    created: bool
    children: tuple[TermSnapshot, ...] = ()


@dataclass(slots=True)
class TermImporter:
    updater: TermUpdater = field(default_factory=TermUpdater)
    kinds: KindResolver = field(default_factory=KindResolver)

    def import_term(
        self,
        snapshot: TermSnapshot,
        *,
        source: OntologySource,
        store: TermRepository,
        run: RunState,
        events: EventSink,
        kind: TermKind | None = None,
    ) -> Term:
        """Create ``snapshot`` locally and reconcile it like any existing term.

        Parents that do not exist yet are queued on ``run`` as missing parents.
        An already existing local term is returned unchanged.
        """

        existing = store.get_by_identifier(snapshot.accession)
        if existing is not None:
            return existing

        resolved_kind = kind or self._resolve_kind(snapshot, source)
        label = snapshot.short_label or snapshot.accession
        term = Term(
            short_label=unique_short_label(store, label, kind=resolved_kind),
            kind=resolved_kind,
            accession=snapshot.accession,
            full_name=snapshot.full_name,
        )
        store.add(term)

        self.updater.update(
            UpdateContext(
                term=term,
                snapshot=snapshot,
                source=source,
                store=store,
                run=run,
                events=events,
                identifier=snapshot.accession,
            )
        )
        log.info("Created term %s (%s) as %s", snapshot.accession, term.short_label, resolved_kind)
        events.emit(
            TermCreated(
                accession=snapshot.accession,
                term_id=term.id,
                short_label=term.short_label,
                kind=resolved_kind,
            )
        )
        return term

    def import_node(
        self,
        snapshot: TermSnapshot,
        *,
        source: OntologySource,
        store: TermRepository,
        run: RunState,
        events: EventSink,
    ) -> ImportStep:
        """Import ``snapshot`` if it is missing locally and list its children.

        Callers walking a branch run one node per unit of work and continue
        with ``ImportStep.children``.
        """

        created = False
        if store.get_by_identifier(snapshot.accession) is None:
            self.import_term(snapshot, source=source, store=store, run=run, events=events)
            created = True
        return ImportStep(created=created, children=tuple(source.get_direct_children(snapshot)))

    def _resolve_kind(self, snapshot: TermSnapshot, source: OntologySource) -> TermKind:
        kinds = self.kinds.kinds_for(snapshot, source)
        if not kinds:
            raise CvUpdateError(
                UpdateErrorKind.KIND_NOT_FOUND,
                f"Cannot tell which kind of term {snapshot.accession} is",
                accession=snapshot.accession,
            )
        if len(kinds) > 1:
            log.info(
                "%s belongs to several kinds (%s); importing it once",
                snapshot.accession,
                ", ".join(sorted(kinds)),
            )
        return sorted(kinds)[0]
