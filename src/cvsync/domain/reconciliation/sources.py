"""Registry of the ontology sources configured for a run."""

from __future__ import annotations

from collections.abc import Mapping
from logging import getLogger
from typing import TYPE_CHECKING, Final

from cvsync.domain.model import namespace_of

from .errors import CvUpdateError, UpdateErrorKind

if TYPE_CHECKING:
    from collections.abc import Iterable

    from cvsync.domain.ports import OntologySource

log = getLogger(__name__)

DEFAULT_NAMESPACE_DATABASES: Final[Mapping[str, str]] = {
    "MI": "psi-mi",
    "MOD": "psi-mod",
    "PAR": "psi-par",
    "GO": "go",
    "ECO": "eco",
    "SO": "so",
    "CHEBI": "chebi",
}


class OntologyRegistry:
    def __init__(
        self,
        sources: Iterable[OntologySource] = (),
        *,
        namespace_databases: Mapping[str, str] | None = None,
    ) -> None:
        self._sources: dict[str, OntologySource] = {}
        self._namespace_databases = dict(
            DEFAULT_NAMESPACE_DATABASES if namespace_databases is None else namespace_databases
        )
        for source in sources:
            self.register(source)

    def register(self, source: OntologySource) -> None:
        key = source.ontology_id.upper()
        if key in self._sources:
            raise ValueError(f"Ontology source already registered: {source.ontology_id}")
        self._sources[key] = source

    @property
    def ontology_ids(self) -> tuple[str, ...]:
        return tuple(self._sources)

    def get(self, ontology_id: str) -> OntologySource:
        try:
            return self._sources[ontology_id.upper()]
        except KeyError:
            raise KeyError(f"No ontology source registered for {ontology_id}") from None

    def matching(self, accession: str) -> list[OntologySource]:
        return [
            source
            for source in self._sources.values()
            if source.database_pattern.fullmatch(accession)
        ]

    def source_for_accession(self, accession: str) -> OntologySource:
        """Return the only source whose accession pattern matches ``accession``."""

        candidates = self.matching(accession)
        if not candidates:
            raise CvUpdateError(
                UpdateErrorKind.ONTOLOGY_ACCESS_NOT_FOUND,
                f"No configured ontology matches {accession}",
                accession=accession,
            )
        if len(candidates) > 1:
            names = ", ".join(sorted(source.ontology_id for source in candidates))
            raise CvUpdateError(
                UpdateErrorKind.SEVERAL_MATCHING_ONTOLOGIES,
                f"Several ontologies match {accession}: {names}",
                accession=accession,
            )
        return candidates[0]

    def database_for(self, accession: str) -> str | None:
        """Database of the namespace ``accession`` belongs to, if known."""

        namespace = namespace_of(accession)
        if namespace is None:
            return None
        source = self._sources.get(namespace)
        if source is not None:
            return source.database
        return self._namespace_databases.get(namespace)
