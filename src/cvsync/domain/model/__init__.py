"""Public domain model surface."""

from __future__ import annotations

from cvsync.domain.model.accessions import namespace_of, same_accession
from cvsync.domain.model.audit import TermMerge
from cvsync.domain.model.entity import Entity, new_id
from cvsync.domain.model.enums import (
    AliasType,
    MergeReason,
    Qualifier,
    ReferenceKind,
    TermKind,
    Topic,
)
from cvsync.domain.model.snapshot import (
    AliasSnapshot,
    AnnotationSnapshot,
    TermSnapshot,
    XrefSnapshot,
)
from cvsync.domain.model.term import (
    Alias,
    Annotation,
    CrossReference,
    CyclicParentError,
    Term,
)

OBSOLETE_TERM_MESSAGE = "obsolete term"
PROTECTED_QUALIFIERS: frozenset[str] = frozenset({Qualifier.IDENTITY, Qualifier.SECONDARY_AC})

__all__ = [
    "OBSOLETE_TERM_MESSAGE",
    "PROTECTED_QUALIFIERS",
    "Alias",
    "AliasSnapshot",
    "AliasType",
    "Annotation",
    "AnnotationSnapshot",
    "CrossReference",
    "CyclicParentError",
    "Entity",
    "MergeReason",
    "Qualifier",
    "ReferenceKind",
    "Term",
    "TermKind",
    "TermMerge",
    "TermSnapshot",
    "Topic",
    "XrefSnapshot",
    "namespace_of",
    "new_id",
    "same_accession",
]
