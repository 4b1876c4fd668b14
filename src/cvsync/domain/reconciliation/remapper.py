"""Fate of terms the ontology marks obsolete.

Responsibilities of this stage:
- report obsolete terms without a replacement, leaving them untouched
- defer replacements from another ontology until that ontology is at hand
- repoint the identity of a term whose replacement has no local record yet
- merge a term into its replacement's local record otherwise

A merge cannot be undone once committed. Every merge is logged with its
affected-row count, recorded as a ``TermMerge`` and announced through an
``ObsoleteRemapped`` event.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from cvsync.domain.model import (
    CrossReference,
    CyclicParentError,
    Qualifier,
    TermMerge,
    same_accession,
)

from .errors import CvUpdateError, UpdateErrorKind
from .events import ObsoleteImpossibleToRemap, ObsoleteRemapped
from .merge import MergeRegistry

if TYPE_CHECKING:
    from cvsync.domain.model import Term, TermSnapshot

    from .context import UpdateContext
    from .sources import OntologyRegistry

log = getLogger(__name__)


class RemapOutcome(StrEnum):
    REPOINTED = "repointed"
    MERGED = "merged"
    IMPOSSIBLE = "impossible"
    DEFERRED = "deferred"

    @property
    def continues_update(self) -> bool:
        """Whether the term still exists and should go through the regular update."""

        return self in {RemapOutcome.REPOINTED, RemapOutcome.IMPOSSIBLE}


@dataclass(slots=True)
class ObsoleteRemapper:
    sources: OntologyRegistry
    merges: MergeRegistry = field(default_factory=MergeRegistry.default)

    def remap(self, context: UpdateContext) -> RemapOutcome:
        term = context.term
        snapshot = context.snapshot
        target = snapshot.remapped_to

        if not target:
            log.info("Obsolete term %s has no replacement", context.identifier)
            context.events.emit(
                ObsoleteImpossibleToRemap(
                    accession=context.identifier,
                    term_id=term.id,
                    candidate_terms=snapshot.consider,
                    message=snapshot.obsolete_message,
                )
            )
            return RemapOutcome.IMPOSSIBLE

        if not context.source.database_pattern.fullmatch(target):
            if self.sources.database_for(target) is None:
                raise CvUpdateError(
                    UpdateErrorKind.ONTOLOGY_DATABASE_NOT_FOUND,
                    f"{context.identifier} is remapped to {target}, "
                    "whose namespace has no known database",
                    accession=context.identifier,
                    term_id=term.id,
                )
            log.info("Deferring remap of %s to %s", context.identifier, target)
            context.run.defer_remap(target, term.id)
            return RemapOutcome.DEFERRED

        replacement = context.source.get_term(target)
        if replacement is None:
            raise CvUpdateError(
                UpdateErrorKind.NON_EXISTING_TERM,
                f"{context.identifier} is remapped to {target}, which is not in "
                f"{context.source.ontology_id}",
                accession=context.identifier,
                term_id=term.id,
            )
        return self.remap_to(context, replacement)

    def remap_to(self, context: UpdateContext, replacement: TermSnapshot) -> RemapOutcome:
        """Point ``context.term`` at ``replacement``, merging if it already exists."""

        existing = context.store.get_by_identifier(replacement.accession)
        if existing is None or existing is context.term:
            self._repoint(context, replacement)
            return RemapOutcome.REPOINTED
        self._merge(context, existing, replacement)
        return RemapOutcome.MERGED

    def _repoint(self, context: UpdateContext, replacement: TermSnapshot) -> None:
        term = context.term
        changes = context.changes
        previous = term.accession
        identity = context.identity_xref
        previous_database = identity.database if identity is not None else context.source.database

        term.accession = replacement.accession
        if previous and not same_accession(previous, replacement.accession):
            secondary = CrossReference(
                database=previous_database,
                qualifier=Qualifier.SECONDARY_AC,
                primary_id=previous,
            )
            term.add_xref(secondary)
            changes.created_xrefs.append(secondary)

        if identity is None:
            identity = CrossReference(
                database=context.source.database,
                qualifier=Qualifier.IDENTITY,
                primary_id=replacement.accession,
            )
            term.add_xref(identity)
            context.identity_xref = identity
            changes.created_xrefs.append(identity)
        else:
            identity.database = context.source.database
            identity.qualifier = Qualifier.IDENTITY
            identity.primary_id = replacement.accession
            changes.updated_xrefs.append(identity)

        changes.updated_identifier = True
        context.snapshot = replacement
        context.identifier = replacement.accession

        log.info("Remapped obsolete term %s to %s", previous, replacement.accession)
        context.events.emit(
            ObsoleteRemapped(
                from_accession=previous,
                to_accession=replacement.accession,
                term_id=term.id,
            )
        )

    def _merge(
        self,
        context: UpdateContext,
        target: Term,
        replacement: TermSnapshot,
    ) -> None:
        term = context.term
        store = context.store

        repoint = self.merges.rule_for(term.kind)
        if repoint is None:
            raise CvUpdateError(
                UpdateErrorKind.IMPOSSIBLE_MERGE,
                f"No repoint rule for {term.kind}; {context.identifier} must be merged "
                f"into {target.accession} manually",
                accession=context.identifier,
                term_id=term.id,
            )

        affected = repoint(store, term, target)
        for child in store.children_of(term):
            child.remove_parent(term)
            try:
                child.add_parent(target)
            except CyclicParentError:
                log.warning(
                    "Dropped edge %s -> %s while merging: target would close a cycle",
                    child.accession,
                    context.identifier,
                )
            affected += 1

        remaining = store.count_references(term)
        if remaining:
            raise CvUpdateError(
                UpdateErrorKind.IMPOSSIBLE_MERGE,
                f"{remaining} references still point at {context.identifier} after "
                f"repointing them to {target.accession}",
                accession=context.identifier,
                term_id=term.id,
            )

        already_secondary = any(
            xref.qualifier == Qualifier.SECONDARY_AC
            and same_accession(xref.primary_id, term.accession)
            for xref in target.xrefs
        )
        if term.accession and not already_secondary:
            target.add_xref(
                CrossReference(
                    database=context.source.database,
                    qualifier=Qualifier.SECONDARY_AC,
                    primary_id=term.accession,
                )
            )

        store.record_merge(
            TermMerge(
                kind=term.kind,
                source_id=term.id,
                source_accession=term.accession,
                target_id=target.id,
                target_accession=target.accession,
                affected_count=affected,
            )
        )
        store.remove(term)

        log.info(
            "Merged obsolete term %s into %s: %d references repointed",
            context.identifier,
            target.accession,
            affected,
        )
        context.events.emit(
            ObsoleteRemapped(
                from_accession=context.identifier,
                to_accession=replacement.accession,
                term_id=term.id,
                target_id=target.id,
                affected_count=affected,
                merged=True,
            )
        )
