"""Translate OLS term payloads into ontology term snapshots.

OLS serves the OBO content of an ontology as JSON. The mapping is:

- the synonym of the configured short-label type is the short label, the
  OLS label is the full name
- other synonyms become aliases
- definition citations become ``primary-reference`` cross-references
- ``search-url``, ``id-validation-regexp`` and ``url`` pseudo-xrefs become
  annotations or the term url; every other xref is a ``see-also`` xref
- ``OBSOLETE`` definitions carry the obsolete message
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Final

from cvsync.domain.model import (
    AliasSnapshot,
    AliasType,
    AnnotationSnapshot,
    Qualifier,
    TermSnapshot,
    Topic,
    XrefSnapshot,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from cvsync.config.ols import OlsOntologyConfig

    from .schema import OlsSynonym, OlsTerm, OlsXref

_CITATION_DATABASES: Final[dict[str, str]] = {
    "PMID": "pubmed",
    "DOI": "doi",
    "RESID": "resid",
    "UNIMOD": "unimod",
    "GO": "go",
    "CHEBI": "chebi",
}
_ANNOTATION_XREFS: Final[dict[str, Topic]] = {
    "search-url": Topic.SEARCH_URL,
    "id-validation-regexp": Topic.VALIDATION_REGEXP,
}
_ALTERNATE_SYNONYM_TYPES: Final[frozenset[str]] = frozenset(
    {"PSI-MI-alternate", "PSI-MOD-alternate"}
)
_OBSOLETE_PREFIX = re.compile(r"^\s*OBSOLETE\b[\s:.\-]*", re.IGNORECASE)
_IRI_ACCESSION = re.compile(r"(?P<prefix>[A-Za-z]+)_(?P<local>\d+)$")


class TranslationError(ValueError):
    """Raised when a payload does not describe a usable term."""


def accession_from_iri(value: str) -> str | None:
    """``http://purl.obolibrary.org/obo/MI_0018`` -> ``MI:0018``; obo ids pass through."""

    if ":" in value and "/" not in value:
        return value
    match = _IRI_ACCESSION.search(value)
    if match is None:
        return None
    return f"{match['prefix'].upper()}:{match['local']}"


def _synonym_type(synonym: OlsSynonym) -> str | None:
    if synonym.type is None:
        return None
    # OLS reports either the bare type or the full property IRI.
    return synonym.type.rsplit("#", 1)[-1].rsplit("/", 1)[-1]


def _strings(values: Iterable[object] | None) -> tuple[str, ...]:
    if not values:
        return ()
    return tuple(str(value).strip() for value in values if str(value).strip())


def _xref_value(xref: OlsXref) -> str | None:
    value = xref.id or xref.description
    if value is None:
        return None
    return value.strip().strip('"') or None


def translate_term(
    term: OlsTerm,
    ontology: OlsOntologyConfig,
    *,
    parent_accessions: Iterable[str] = (),
) -> TermSnapshot:
    accession = term.obo_id or accession_from_iri(term.short_form or term.iri)
    if accession is None:
        raise TranslationError(f"OLS term {term.iri} has no usable accession")

    short_label = term.label
    aliases: list[AliasSnapshot] = []
    for synonym in term.obo_synonym or ():
        synonym_type = _synonym_type(synonym)
        if synonym_type is not None and synonym_type == ontology.short_label_synonym:
            short_label = synonym.name
            continue
        alias_type = (
            AliasType.ALTERNATE_LABEL
            if synonym_type in _ALTERNATE_SYNONYM_TYPES
            else AliasType.GO_SYNONYM
        )
        aliases.append(AliasSnapshot(name=synonym.name, alias_type=alias_type))

    definition, obsolete_message = _definition(term)
    xrefs, annotations, url = _xrefs(term)
    remapped_to = (
        accession_from_iri(term.term_replaced_by) if term.term_replaced_by else None
    )

    return TermSnapshot(
        accession=accession,
        short_label=short_label,
        full_name=term.label,
        definition=definition,
        url=url,
        obsolete=term.is_obsolete,
        obsolete_message=obsolete_message,
        remapped_to=remapped_to,
        consider=tuple(
            candidate
            for value in _strings(term.annotation.get("consider"))
            if (candidate := accession_from_iri(value)) is not None
        ),
        parent_accessions=frozenset(parent.upper() for parent in parent_accessions),
        xrefs=tuple(xrefs),
        aliases=tuple(aliases),
        annotations=tuple(annotations),
        comments=_strings(term.annotation.get("comment")),
    )


def _definition(term: OlsTerm) -> tuple[str | None, str | None]:
    texts = [
        citation.definition
        for citation in term.obo_definition_citation or ()
        if citation.definition
    ]
    if not texts and term.description:
        texts = [text for text in term.description if text]
    if not texts:
        return None, None
    definition = texts[0].strip()
    if not term.is_obsolete:
        return definition, None
    message = _OBSOLETE_PREFIX.sub("", definition).strip()
    return definition, message or None


def _xrefs(
    term: OlsTerm,
) -> tuple[list[XrefSnapshot], list[AnnotationSnapshot], str | None]:
    xrefs: list[XrefSnapshot] = []
    annotations: list[AnnotationSnapshot] = []
    url: str | None = None

    for citation in term.obo_definition_citation or ():
        for xref in citation.obo_xrefs:
            value = _xref_value(xref)
            if xref.database is None or value is None:
                continue
            database = _CITATION_DATABASES.get(xref.database.upper(), xref.database.lower())
            xrefs.append(
                XrefSnapshot(
                    database=database,
                    primary_id=value,
                    qualifier=Qualifier.PRIMARY_REFERENCE,
                )
            )

    for xref in term.obo_xref or ():
        value = _xref_value(xref)
        if xref.database is None or value is None:
            continue
        database = xref.database.lower()
        if database in _ANNOTATION_XREFS:
            annotations.append(AnnotationSnapshot(topic=_ANNOTATION_XREFS[database], text=value))
        elif database == Topic.URL:
            url = url or value
        else:
            xrefs.append(
                XrefSnapshot(
                    database=_CITATION_DATABASES.get(xref.database.upper(), database),
                    primary_id=value,
                    qualifier=Qualifier.SEE_ALSO,
                )
            )
    return xrefs, annotations, url
