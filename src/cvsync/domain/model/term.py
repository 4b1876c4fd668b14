"""Controlled-vocabulary terms. ``Term`` is the aggregate root.

A term owns its cross-references, aliases and annotations (1:n, deleted with
the term). Parent edges point at other aggregates and form a DAG; children are
not held in memory and are looked up through the store when needed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .accessions import same_accession
from .entity import Entity
from .enums import Qualifier, Topic

if TYPE_CHECKING:
    from collections.abc import Iterator

    from .enums import TermKind


class CyclicParentError(ValueError):
    """Raised when a parent edge would close a cycle in the term DAG."""


@dataclass(eq=False, kw_only=True)
class CrossReference(Entity):
    database: str
    primary_id: str
    qualifier: str | None = None

    @property
    def is_identity(self) -> bool:
        return self.qualifier == Qualifier.IDENTITY


@dataclass(eq=False, kw_only=True)
class Alias(Entity):
    name: str
    alias_type: str | None = None


@dataclass(eq=False, kw_only=True)
class Annotation(Entity):
    topic: str
    text: str | None = None


@dataclass(eq=False, kw_only=True)
class Term(Entity):
    short_label: str
    kind: TermKind
    accession: str | None = None
    full_name: str | None = None
    obsolete: bool = False
    remapped_to: str | None = None

    # Owned children
    _xrefs: list[CrossReference] = field(default_factory=list["CrossReference"], repr=False)
    _aliases: list[Alias] = field(default_factory=list["Alias"], repr=False)
    _annotations: list[Annotation] = field(default_factory=list["Annotation"], repr=False)
    # DAG edges towards other aggregates
    _parents: list[Term] = field(default_factory=list["Term"], repr=False)

    @property
    def xrefs(self) -> tuple[CrossReference, ...]:
        return tuple(self._xrefs)

    @property
    def aliases(self) -> tuple[Alias, ...]:
        return tuple(self._aliases)

    @property
    def annotations(self) -> tuple[Annotation, ...]:
        return tuple(self._annotations)

    @property
    def parents(self) -> tuple[Term, ...]:
        return tuple(self._parents)

    @property
    def hidden(self) -> bool:
        return any(annotation.topic == Topic.HIDDEN for annotation in self._annotations)

    def identity_xrefs(self, database: str | None = None) -> list[CrossReference]:
        """Identity cross-references, optionally restricted to one database."""

        wanted = database.casefold() if database is not None else None
        return [
            xref
            for xref in self._xrefs
            if xref.is_identity and (wanted is None or xref.database.casefold() == wanted)
        ]

    def annotations_for(self, topic: str) -> list[Annotation]:
        return [annotation for annotation in self._annotations if annotation.topic == topic]

    # Commands ---------------------------------------------------------------

    def add_xref(self, xref: CrossReference) -> None:
        if xref in self._xrefs:
            return
        self._xrefs.append(xref)

    def remove_xref(self, xref: CrossReference) -> None:
        self._xrefs.remove(xref)

    def add_alias(self, alias: Alias) -> None:
        if alias in self._aliases:
            return
        self._aliases.append(alias)

    def remove_alias(self, alias: Alias) -> None:
        self._aliases.remove(alias)

    def add_annotation(self, annotation: Annotation) -> None:
        if annotation in self._annotations:
            return
        self._annotations.append(annotation)

    def remove_annotation(self, annotation: Annotation) -> None:
        self._annotations.remove(annotation)

    def has_parent(self, parent: Term) -> bool:
        return any(existing is parent for existing in self._parents)

    def add_parent(self, parent: Term) -> bool:
        """Attach ``parent``; return False when the edge already exists.

        Raises ``CyclicParentError`` when ``parent`` is this term or one of its
        descendants.
        """

        if self.has_parent(parent):
            return False
        if parent is self or any(ancestor is self for ancestor in parent.iter_ancestors()):
            raise CyclicParentError(
                f"{parent.accession or parent.short_label} cannot become a parent of "
                f"{self.accession or self.short_label}: the edge would close a cycle"
            )
        self._parents.append(parent)
        return True

    def remove_parent(self, parent: Term) -> None:
        self._parents.remove(parent)

    def iter_ancestors(self) -> Iterator[Term]:
        """Yield every ancestor once, nearest first."""

        seen: set[int] = set()
        pending = list(self._parents)
        while pending:
            current = pending.pop(0)
            if id(current) in seen:
                continue
            seen.add(id(current))
            yield current
            pending.extend(current._parents)  # noqa: SLF001

    def matches_accession(self, accession: str) -> bool:
        if same_accession(self.accession, accession):
            return True
        return any(same_accession(xref.primary_id, accession) for xref in self.identity_xrefs())
