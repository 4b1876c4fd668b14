"""Ports for persisting CV terms."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from uuid import UUID

    from cvsync.domain.model import ReferenceKind, Term, TermKind, TermMerge


class StoreUnavailableError(RuntimeError):
    """Raised when the backing store cannot be reached at all.

    Unlike every other failure during a run, this one aborts the run.
    """


@dataclass(frozen=True, slots=True)
class DuplicateGroup:
    """Local terms of one kind sharing an accession."""

    accession: str
    term_ids: tuple[UUID, ...]


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class TermRepository(Repository["Term"], Protocol):
    """Persistence contract for terms and the references pointing at them."""

    def remove(self, term: Term) -> None: ...

    def get(self, term_id: UUID) -> Term | None: ...

    def get_by_identifier(self, accession: str) -> Term | None:
        """Match on the accession first, then on identity cross-references."""
        ...

    def get_by_short_label(self, short_label: str, *, kind: TermKind) -> Term | None: ...

    def short_labels_like(self, prefix: str, *, kind: TermKind) -> list[str]: ...

    def children_of(self, term: Term) -> list[Term]: ...

    def term_ids_for_ontology(self, *, database: str, prefix: str) -> list[UUID]: ...

    def find_duplicates(self, *, prefix: str) -> list[DuplicateGroup]: ...

    def repoint_references(self, kind: ReferenceKind, source: Term, target: Term) -> int:
        """Move every ``kind`` reference from ``source`` to ``target``; return the row count."""
        ...

    def count_references(self, term: Term) -> int: ...

    def record_merge(self, merge: TermMerge) -> None: ...
