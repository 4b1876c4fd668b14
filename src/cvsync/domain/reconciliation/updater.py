"""Per-term update: scalar attributes, identity, then the attribute synchronizers.

Responsibilities of this stage:
- run at most once per identifier and run
- align short label, full name, accession and status with the snapshot
- create or repair the identity cross-reference
- delegate collections to the synchronizers (parents only for live terms)
- emit ``TermUpdated`` only when something changed
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Protocol

from cvsync.domain.model import CrossReference, Qualifier, same_accession

from .aliases import AliasSync
from .annotations import AnnotationSync, UsedInClassSync
from .labels import label_in_sync, unique_short_label
from .parents import ParentSync
from .xrefs import CrossReferenceSync

if TYPE_CHECKING:
    from .context import UpdateContext

log = getLogger(__name__)


class SynchronizeAttribute(Protocol):
    """Diff one attribute collection of ``context.term`` against the snapshot."""

    def __call__(self, context: UpdateContext) -> None: ...


@dataclass(slots=True)
class TermUpdater:
    xrefs: SynchronizeAttribute = field(default_factory=CrossReferenceSync)
    aliases: SynchronizeAttribute = field(default_factory=AliasSync)
    annotations: SynchronizeAttribute = field(default_factory=AnnotationSync)
    parents: SynchronizeAttribute = field(default_factory=ParentSync)
    used_in_class: SynchronizeAttribute = field(default_factory=UsedInClassSync)

    def update(self, context: UpdateContext) -> bool:
        """Bring ``context.term`` in line with ``context.snapshot``.

        Returns whether the term changed. Terms already handled during the
        current run are skipped.
        """

        if not context.run.mark_processed(context.identifier):
            log.debug("%s already processed in this run", context.identifier)
            return False

        self._sync_short_label(context)
        self._sync_full_name(context)
        self._sync_identifier(context)
        self._sync_status(context)

        self.xrefs(context)
        self.aliases(context)
        self.annotations(context)
        if not context.obsolete:
            self.parents(context)
        self.used_in_class(context)

        if not context.changes.has_changes:
            return False
        context.events.emit(context.changes.to_event(context.term))
        return True

    def _sync_short_label(self, context: UpdateContext) -> None:
        term = context.term
        ontology_label = context.snapshot.short_label
        if not ontology_label or label_in_sync(term.short_label, ontology_label):
            return
        term.short_label = unique_short_label(
            context.store,
            ontology_label,
            kind=term.kind,
            owner=term,
        )
        context.changes.updated_label = True

    def _sync_full_name(self, context: UpdateContext) -> None:
        full_name = context.snapshot.full_name
        if full_name is None or full_name == context.term.full_name:
            return
        context.term.full_name = full_name
        context.changes.updated_full_name = True

    def _sync_identifier(self, context: UpdateContext) -> None:
        term = context.term
        accession = context.snapshot.accession
        database = context.source.database

        if not same_accession(term.accession, accession):
            term.accession = accession
            context.changes.updated_identifier = True

        identity = context.identity_xref
        if identity is None:
            identity = CrossReference(
                database=database,
                qualifier=Qualifier.IDENTITY,
                primary_id=accession,
            )
            term.add_xref(identity)
            context.identity_xref = identity
            context.changes.created_xrefs.append(identity)
            return

        if (
            identity.database == database
            and identity.qualifier == Qualifier.IDENTITY
            and identity.primary_id == accession
        ):
            return
        identity.database = database
        identity.qualifier = Qualifier.IDENTITY
        identity.primary_id = accession
        context.changes.updated_xrefs.append(identity)

    def _sync_status(self, context: UpdateContext) -> None:
        term = context.term
        obsolete = context.obsolete
        remapped_to = context.snapshot.remapped_to if obsolete else None
        if term.obsolete == obsolete and term.remapped_to == remapped_to:
            return
        term.obsolete = obsolete
        term.remapped_to = remapped_to
        context.changes.updated_status = True
