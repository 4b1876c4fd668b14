"""Ontology Lookup Service (OLS) configuration values."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Final

from .env import env_flag
from .errors import UnknownOntologyError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_OLS_BASE_URL: Final[str] = "https://www.ebi.ac.uk/ols4/api/"
DEFAULT_PAGE_SIZE: Final[int] = 500


@dataclass(frozen=True, slots=True)
class OlsOntologyConfig:
    """How one ontology is served by OLS and stored locally."""

    ontology_id: str
    ols_name: str
    database: str
    accession_pattern: str
    # OBO synonym type carrying the curated short label
    short_label_synonym: str | None = None


DEFAULT_OLS_ONTOLOGIES: Final[tuple[OlsOntologyConfig, ...]] = (
    OlsOntologyConfig(
        ontology_id="MI",
        ols_name="mi",
        database="psi-mi",
        accession_pattern=r"MI:\d{4}",
        short_label_synonym="PSI-MI-short",
    ),
    OlsOntologyConfig(
        ontology_id="MOD",
        ols_name="mod",
        database="psi-mod",
        accession_pattern=r"MOD:\d{5}",
        short_label_synonym="PSI-MOD-label",
    ),
)


@dataclass(frozen=True, slots=True)
class OlsConfig:
    resilience: ResilienceConfig
    ontologies: tuple[OlsOntologyConfig, ...] = field(
        default_factory=lambda: DEFAULT_OLS_ONTOLOGIES
    )
    page_size: int = DEFAULT_PAGE_SIZE

    def ontology(self, ontology_id: str) -> OlsOntologyConfig:
        for ontology in self.ontologies:
            if ontology.ontology_id.upper() == ontology_id.upper():
                return ontology
        known = ", ".join(ontology.ontology_id for ontology in self.ontologies)
        raise UnknownOntologyError(f"No OLS ontology configured for {ontology_id} ({known})")


def get_ols_config(*, resilience: ResilienceConfig | None = None) -> OlsConfig:
    base_url = os.getenv("CVSYNC_OLS_BASE_URL") or DEFAULT_OLS_BASE_URL
    if not base_url.endswith("/"):
        base_url = f"{base_url}/"

    return OlsConfig(
        resilience=resilience
        or ResilienceConfig(
            name="ols",
            base_url=base_url,
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
            retry=RetryPolicy(total=4),
            cache=CacheConfig() if env_flag("CVSYNC_OLS_CACHE", default=True) else None,
            default_headers={"Accept": "application/json"},
        ),
    )
