"""Explicit state threaded through a reconciliation run.

``RunState`` lives for one whole run and survives unit-of-work boundaries, so
it only holds accessions and term ids, never ORM-bound objects.
``UpdateContext`` lives for exactly one term update inside one unit of work.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .events import TermUpdated

if TYPE_CHECKING:
    from uuid import UUID

    from cvsync.domain.model import (
        Alias,
        Annotation,
        CrossReference,
        Term,
        TermSnapshot,
    )
    from cvsync.domain.ports import OntologySource, TermRepository

    from .events import EventSink


@dataclass(slots=True)
class RunState:
    excluded_roots: frozenset[str] = frozenset()
    processed_terms: set[str] = field(default_factory=set[str])
    missing_parents: dict[str, set[UUID]] = field(default_factory=dict[str, "set[UUID]"])
    deferred_remaps: dict[str, set[UUID]] = field(default_factory=dict[str, "set[UUID]"])

    def mark_processed(self, identifier: str) -> bool:
        """Record ``identifier``; return False if it was already processed in this run."""

        key = identifier.casefold()
        if key in self.processed_terms:
            return False
        self.processed_terms.add(key)
        return True

    def is_processed(self, identifier: str) -> bool:
        return identifier.casefold() in self.processed_terms

    def is_excluded(self, accession: str) -> bool:
        return accession.upper() in self.excluded_roots

    def record_missing_parent(self, accession: str, dependent_id: UUID) -> None:
        self.missing_parents.setdefault(accession.upper(), set()).add(dependent_id)

    def pop_missing_parent(self) -> tuple[str, set[UUID]] | None:
        if not self.missing_parents:
            return None
        accession = min(self.missing_parents)
        return accession, self.missing_parents.pop(accession)

    def defer_remap(self, target: str, term_id: UUID) -> None:
        self.deferred_remaps.setdefault(target.upper(), set()).add(term_id)

    def pop_deferred_remaps(self) -> list[tuple[str, set[UUID]]]:
        pending = sorted(self.deferred_remaps.items())
        self.deferred_remaps = {}
        return pending

    def checkpoint(self) -> RunState:
        """Copy of the mutable bookkeeping, for ``restore`` after a failed unit."""

        return RunState(
            excluded_roots=self.excluded_roots,
            processed_terms=set(self.processed_terms),
            missing_parents=_copy_queue(self.missing_parents),
            deferred_remaps=_copy_queue(self.deferred_remaps),
        )

    def restore(self, checkpoint: RunState) -> None:
        self.processed_terms = set(checkpoint.processed_terms)
        self.missing_parents = _copy_queue(checkpoint.missing_parents)
        self.deferred_remaps = _copy_queue(checkpoint.deferred_remaps)


def _copy_queue(queue: dict[str, set[UUID]]) -> dict[str, set[UUID]]:
    return {accession: set(term_ids) for accession, term_ids in queue.items()}


@dataclass(slots=True)
class TermChanges:
    """Mutations applied to one term during one update."""

    updated_label: bool = False
    updated_full_name: bool = False
    updated_identifier: bool = False
    updated_status: bool = False
    created_xrefs: list[CrossReference] = field(default_factory=list["CrossReference"])
    updated_xrefs: list[CrossReference] = field(default_factory=list["CrossReference"])
    deleted_xrefs: list[CrossReference] = field(default_factory=list["CrossReference"])
    created_aliases: list[Alias] = field(default_factory=list["Alias"])
    updated_aliases: list[Alias] = field(default_factory=list["Alias"])
    deleted_aliases: list[Alias] = field(default_factory=list["Alias"])
    created_annotations: list[Annotation] = field(default_factory=list["Annotation"])
    updated_annotations: list[Annotation] = field(default_factory=list["Annotation"])
    deleted_annotations: list[Annotation] = field(default_factory=list["Annotation"])
    created_parents: list[str] = field(default_factory=list[str])
    deleted_parents: list[str] = field(default_factory=list[str])

    @property
    def has_changes(self) -> bool:
        return any(
            (
                self.updated_label,
                self.updated_full_name,
                self.updated_identifier,
                self.updated_status,
                self.created_xrefs,
                self.updated_xrefs,
                self.deleted_xrefs,
                self.created_aliases,
                self.updated_aliases,
                self.deleted_aliases,
                self.created_annotations,
                self.updated_annotations,
                self.deleted_annotations,
                self.created_parents,
                self.deleted_parents,
            )
        )

    def to_event(self, term: Term) -> TermUpdated:
        return TermUpdated(
            accession=term.accession,
            term_id=term.id,
            short_label=term.short_label,
            updated_label=self.updated_label,
            updated_full_name=self.updated_full_name,
            updated_identifier=self.updated_identifier,
            updated_status=self.updated_status,
            created_xrefs=tuple(self.created_xrefs),
            updated_xrefs=tuple(self.updated_xrefs),
            deleted_xrefs=tuple(self.deleted_xrefs),
            created_aliases=tuple(self.created_aliases),
            updated_aliases=tuple(self.updated_aliases),
            deleted_aliases=tuple(self.deleted_aliases),
            created_annotations=tuple(self.created_annotations),
            updated_annotations=tuple(self.updated_annotations),
            deleted_annotations=tuple(self.deleted_annotations),
            created_parents=tuple(self.created_parents),
            deleted_parents=tuple(self.deleted_parents),
        )


@dataclass(slots=True, kw_only=True)
class UpdateContext:
    term: Term
    snapshot: TermSnapshot
    source: OntologySource
    store: TermRepository
    run: RunState
    events: EventSink
    identifier: str
    identity_xref: CrossReference | None = None
    changes: TermChanges = field(default_factory=TermChanges)

    @property
    def obsolete(self) -> bool:
        return self.source.is_obsolete(self.snapshot)
