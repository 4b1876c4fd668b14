"""``OntologySource`` backed by the OLS REST API."""

from __future__ import annotations

import re
from logging import getLogger
from typing import TYPE_CHECKING

from .client import OlsClient, OlsRelation
from .translator import translate_term

if TYPE_CHECKING:
    from collections.abc import Iterable

    from cvsync.config.ols import OlsConfig, OlsOntologyConfig
    from cvsync.domain.model import TermSnapshot

    from .schema import OlsTerm

log = getLogger(__name__)


class OlsOntologySource:
    """One ontology served by OLS.

    Terms are fetched lazily and kept for the lifetime of the source, so a run
    asks OLS about each term and relation at most once.
    """

    def __init__(self, ontology: OlsOntologyConfig, client: OlsClient) -> None:
        self._ontology = ontology
        self._client = client
        self._pattern = re.compile(ontology.accession_pattern, re.IGNORECASE)
        self._raw: dict[str, OlsTerm | None] = {}
        self._snapshots: dict[str, TermSnapshot] = {}
        self._related: dict[tuple[str, OlsRelation], tuple[str, ...]] = {}

    @property
    def ontology_id(self) -> str:
        return self._ontology.ontology_id

    @property
    def database(self) -> str:
        return self._ontology.database

    @property
    def database_pattern(self) -> re.Pattern[str]:
        return self._pattern

    def get_term(self, accession: str) -> TermSnapshot | None:
        key = accession.upper()
        cached = self._snapshots.get(key)
        if cached is not None:
            return cached

        raw = self._raw_term(key)
        if raw is None:
            return None
        parents = self._related_accessions(key, raw, OlsRelation.PARENTS)
        snapshot = translate_term(raw, self._ontology, parent_accessions=parents)
        self._snapshots[key] = snapshot
        return snapshot

    def get_direct_parents(self, term: TermSnapshot) -> tuple[TermSnapshot, ...]:
        return self._snapshots_for(sorted(term.parent_accessions))

    def get_all_parents(self, term: TermSnapshot) -> tuple[TermSnapshot, ...]:
        return self._snapshots_for(self._relation(term, OlsRelation.ANCESTORS))

    def get_direct_children(self, term: TermSnapshot) -> tuple[TermSnapshot, ...]:
        return self._snapshots_for(self._relation(term, OlsRelation.CHILDREN))

    def get_root_terms(self) -> tuple[TermSnapshot, ...]:
        roots = self._client.fetch_roots(self._ontology)
        accessions: list[str] = []
        for root in roots:
            accession = self._own_accession(root)
            if accession is None:
                continue
            self._raw.setdefault(accession, root)
            accessions.append(accession)
        return self._snapshots_for(accessions)

    def is_obsolete(self, term: TermSnapshot) -> bool:
        return term.obsolete

    # Internals ----------------------------------------------------------------

    def _raw_term(self, key: str) -> OlsTerm | None:
        if key not in self._raw:
            self._raw[key] = self._client.fetch_term(self._ontology, key)
            if self._raw[key] is None:
                log.debug("%s is unknown to OLS ontology %s", key, self._ontology.ols_name)
        return self._raw[key]

    def _relation(self, term: TermSnapshot, relation: OlsRelation) -> tuple[str, ...]:
        key = term.accession.upper()
        raw = self._raw_term(key)
        if raw is None:
            return ()
        return self._related_accessions(key, raw, relation)

    def _related_accessions(
        self,
        key: str,
        raw: OlsTerm,
        relation: OlsRelation,
    ) -> tuple[str, ...]:
        cache_key = (key, relation)
        if cache_key not in self._related:
            accessions: list[str] = []
            for related in self._client.fetch_related(self._ontology, raw, relation):
                accession = self._own_accession(related)
                if accession is None:
                    continue
                self._raw.setdefault(accession, related)
                accessions.append(accession)
            self._related[cache_key] = tuple(sorted(set(accessions)))
        return self._related[cache_key]

    def _own_accession(self, term: OlsTerm) -> str | None:
        """Accession of ``term`` if it belongs to this ontology (OLS mixes in imports)."""

        if term.obo_id is None or not self._pattern.fullmatch(term.obo_id):
            return None
        return term.obo_id.upper()

    def _snapshots_for(self, accessions: Iterable[str]) -> tuple[TermSnapshot, ...]:
        snapshots: list[TermSnapshot] = []
        for accession in accessions:
            snapshot = self.get_term(accession)
            if snapshot is not None:
                snapshots.append(snapshot)
        return tuple(snapshots)


def build_ols_sources(
    config: OlsConfig,
    ontology_ids: Iterable[str],
    *,
    client: OlsClient | None = None,
) -> list[OlsOntologySource]:
    """One source per requested ontology, sharing a single client."""

    shared_client = client or OlsClient(config=config)
    return [
        OlsOntologySource(config.ontology(ontology_id), shared_client)
        for ontology_id in ontology_ids
    ]
