"""Port for authoritative ontology providers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    import re

    from cvsync.domain.model import TermSnapshot


@runtime_checkable
class OntologySource(Protocol):
    """Yields term snapshots for exactly one ontology namespace."""

    @property
    def ontology_id(self) -> str:
        """Namespace prefix of the accessions served (``MI``, ``MOD``)."""
        ...

    @property
    def database(self) -> str:
        """Database label used by identity cross-references (``psi-mi``)."""
        ...

    @property
    def database_pattern(self) -> re.Pattern[str]:
        """Pattern matching every accession this source can answer for."""
        ...

    def get_term(self, accession: str) -> TermSnapshot | None: ...

    def get_direct_parents(self, term: TermSnapshot) -> tuple[TermSnapshot, ...]: ...

    def get_all_parents(self, term: TermSnapshot) -> tuple[TermSnapshot, ...]: ...

    def get_direct_children(self, term: TermSnapshot) -> tuple[TermSnapshot, ...]: ...

    def get_root_terms(self) -> tuple[TermSnapshot, ...]: ...

    def is_obsolete(self, term: TermSnapshot) -> bool: ...
