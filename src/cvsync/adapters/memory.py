"""In-memory ``OntologySource`` for offline runs and tests."""

from __future__ import annotations

import re
from collections import deque
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from cvsync.domain.model import TermSnapshot


class InMemoryOntologySource:
    """Serve a fixed set of snapshots.

    The hierarchy is taken from each snapshot's ``parent_accessions``; terms
    without parents are the roots.
    """

    def __init__(
        self,
        ontology_id: str,
        database: str,
        pattern: str,
        terms: Iterable[TermSnapshot] = (),
    ) -> None:
        self._ontology_id = ontology_id
        self._database = database
        self._pattern = re.compile(pattern, re.IGNORECASE)
        self._terms: dict[str, TermSnapshot] = {}
        self._children: dict[str, set[str]] = {}
        for term in terms:
            self.add(term)

    @property
    def ontology_id(self) -> str:
        return self._ontology_id

    @property
    def database(self) -> str:
        return self._database

    @property
    def database_pattern(self) -> re.Pattern[str]:
        return self._pattern

    def add(self, term: TermSnapshot) -> None:
        key = term.accession.upper()
        previous = self._terms.get(key)
        if previous is not None:
            for parent in previous.parent_accessions:
                self._children.get(parent.upper(), set()).discard(key)
        self._terms[key] = term
        for parent in term.parent_accessions:
            self._children.setdefault(parent.upper(), set()).add(key)

    def get_term(self, accession: str) -> TermSnapshot | None:
        return self._terms.get(accession.upper())

    def get_direct_parents(self, term: TermSnapshot) -> tuple[TermSnapshot, ...]:
        return self._lookup(sorted(term.parent_accessions))

    def get_all_parents(self, term: TermSnapshot) -> tuple[TermSnapshot, ...]:
        seen: set[str] = set()
        ordered: list[str] = []
        pending = deque(sorted(term.parent_accessions))
        while pending:
            accession = pending.popleft().upper()
            if accession in seen:
                continue
            seen.add(accession)
            ordered.append(accession)
            parent = self._terms.get(accession)
            if parent is not None:
                pending.extend(sorted(parent.parent_accessions))
        return self._lookup(ordered)

    def get_direct_children(self, term: TermSnapshot) -> tuple[TermSnapshot, ...]:
        return self._lookup(sorted(self._children.get(term.accession.upper(), ())))

    def get_root_terms(self) -> tuple[TermSnapshot, ...]:
        return tuple(
            term for _, term in sorted(self._terms.items()) if not term.parent_accessions
        )

    def is_obsolete(self, term: TermSnapshot) -> bool:
        return term.obsolete

    def _lookup(self, accessions: Iterable[str]) -> tuple[TermSnapshot, ...]:
        found = (self._terms.get(accession.upper()) for accession in accessions)
        return tuple(term for term in found if term is not None)
