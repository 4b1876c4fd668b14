"""Cross-reference synchronization.

Responsibilities of this stage:
- merge-join local cross-references with the ontology's on (database, qualifier, id)
- delete stale local cross-references except identity and secondary-ac ones
- create cross-references the ontology adds, never a second identity per database
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from cvsync.domain.model import PROTECTED_QUALIFIERS, CrossReference, Qualifier

from .diff import diff_sorted
from .keys import xref_key

if TYPE_CHECKING:
    from .context import UpdateContext

log = getLogger(__name__)


class CrossReferenceSync:
    def __call__(self, context: UpdateContext) -> None:
        term = context.term
        changes = context.changes
        join = diff_sorted(
            term.xrefs,
            context.snapshot.xrefs,
            local_key=xref_key,
            remote_key=xref_key,
        )

        for xref in join.local_only:
            if xref.qualifier in PROTECTED_QUALIFIERS or xref is context.identity_xref:
                continue
            term.remove_xref(xref)
            changes.deleted_xrefs.append(xref)

        identity_databases = {xref.database.casefold() for xref in term.identity_xrefs()}
        for remote in join.remote_only:
            if remote.qualifier == Qualifier.IDENTITY:
                database = remote.database.casefold()
                if database in identity_databases:
                    log.debug(
                        "Skipping second identity xref %s:%s on %s",
                        remote.database,
                        remote.primary_id,
                        context.identifier,
                    )
                    continue
                identity_databases.add(database)
            xref = CrossReference(
                database=remote.database,
                qualifier=remote.qualifier,
                primary_id=remote.primary_id,
            )
            term.add_xref(xref)
            changes.created_xrefs.append(xref)
