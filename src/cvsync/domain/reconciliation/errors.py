"""Error taxonomy of a reconciliation run.

Every kind below is caught at the per-term unit boundary and reported as an
``UpdateError`` event; none of them aborts the run.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uuid import UUID

    from .events import UpdateError


class UpdateErrorKind(StrEnum):
    NON_EXISTING_TERM = "non_existing_term"
    ONTOLOGY_DATABASE_NOT_FOUND = "ontology_database_no_found"
    IMPOSSIBLE_MERGE = "cv_impossible_merge"
    FATAL = "fatal"
    DUPLICATED_TERM = "duplicated_cv"
    ONTOLOGY_ACCESS_NOT_FOUND = "ontology_access_not_found"
    SEVERAL_MATCHING_ONTOLOGIES = "several_matching_ontology_accesses"
    IMPOSSIBLE_IMPORT = "impossible_import"
    TERM_NOT_FOUND = "not_found_intact_ac"
    NULL_IDENTIFIER = "null_identifier"
    MULTI_IDENTITIES = "multi_identities"
    KIND_NOT_FOUND = "cv_class_not_found"
    INVALID_KIND = "invalid_cv_class"
    CYCLIC_PARENT = "cyclic_parent"


class CvUpdateError(Exception):
    """Raised by reconciliation stages when a single term cannot be processed."""

    def __init__(
        self,
        kind: UpdateErrorKind,
        message: str,
        *,
        accession: str | None = None,
        term_id: UUID | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.accession = accession
        self.term_id = term_id

    def to_event(
        self,
        *,
        accession: str | None = None,
        term_id: UUID | None = None,
    ) -> UpdateError:
        from .events import UpdateError  # noqa: PLC0415

        return UpdateError(
            kind=self.kind,
            message=self.message,
            accession=self.accession or accession,
            term_id=self.term_id or term_id,
        )
