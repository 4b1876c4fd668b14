"""Parent (DAG edge) synchronization.

Responsibilities of this stage:
- resolve the ontology accession of every local parent
- drop edges the ontology no longer has, unless the parent is gone or obsolete
- attach parents that exist locally and queue the others for later creation
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from cvsync.domain.model import CyclicParentError

from .diff import diff_sorted
from .errors import UpdateErrorKind
from .events import UpdateError
from .keys import accession_key

if TYPE_CHECKING:
    from cvsync.domain.model import Term
    from cvsync.domain.ports import OntologySource

    from .context import UpdateContext

log = getLogger(__name__)


def parent_accession(parent: Term, source: OntologySource) -> str | None:
    """Accession of ``parent`` within ``source``, or None if it is not managed there.

    The identity cross-reference for the source's database wins; the term's
    own accession is used when it matches the source's accession pattern.
    """

    identities = parent.identity_xrefs(source.database)
    if identities:
        return identities[0].primary_id
    if parent.accession and source.database_pattern.fullmatch(parent.accession):
        return parent.accession
    return None


class ParentSync:
    def __call__(self, context: UpdateContext) -> None:
        term = context.term
        source = context.source
        changes = context.changes

        managed: list[tuple[str, Term]] = []
        for parent in term.parents:
            accession = parent_accession(parent, source)
            if accession is not None:
                managed.append((accession, parent))

        join = diff_sorted(
            managed,
            list(context.snapshot.parent_accessions),
            local_key=lambda entry: accession_key(entry[0]),
            remote_key=accession_key,
        )

        for accession, parent in join.local_only:
            if self._keep_edge(accession, parent, source):
                continue
            term.remove_parent(parent)
            changes.deleted_parents.append(accession)

        for accession in sorted(join.remote_only):
            if context.run.is_excluded(accession):
                continue
            parent = context.store.get_by_identifier(accession)
            if parent is None:
                log.debug("Parent %s of %s not present yet", accession, context.identifier)
                context.run.record_missing_parent(accession, term.id)
                continue
            try:
                added = term.add_parent(parent)
            except CyclicParentError as exc:
                context.events.emit(
                    UpdateError(
                        kind=UpdateErrorKind.CYCLIC_PARENT,
                        message=str(exc),
                        accession=context.identifier,
                        term_id=term.id,
                    )
                )
                continue
            if added:
                changes.created_parents.append(accession)

    def _keep_edge(self, accession: str, parent: Term, source: OntologySource) -> bool:
        if parent.obsolete:
            return True
        snapshot = source.get_term(accession)
        # parent vanished from the ontology, or obsolete hierarchy
        return snapshot is None or source.is_obsolete(snapshot)
