"""Immutable term snapshots as provided by an ontology source."""

from __future__ import annotations

from dataclasses import dataclass

from .accessions import namespace_of


@dataclass(frozen=True, slots=True, kw_only=True)
class XrefSnapshot:
    database: str
    primary_id: str
    qualifier: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class AliasSnapshot:
    name: str
    alias_type: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class AnnotationSnapshot:
    topic: str
    text: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class TermSnapshot:
    """Canonical view of one ontology term at the time it was fetched."""

    accession: str
    short_label: str
    full_name: str | None = None
    definition: str | None = None
    url: str | None = None
    obsolete: bool = False
    obsolete_message: str | None = None
    remapped_to: str | None = None
    consider: tuple[str, ...] = ()
    parent_accessions: frozenset[str] = frozenset()
    xrefs: tuple[XrefSnapshot, ...] = ()
    aliases: tuple[AliasSnapshot, ...] = ()
    annotations: tuple[AnnotationSnapshot, ...] = ()
    comments: tuple[str, ...] = ()

    @property
    def namespace(self) -> str | None:
        return namespace_of(self.accession)
