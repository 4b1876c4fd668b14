"""OLS REST API client."""

from __future__ import annotations

import asyncio
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING
from urllib.parse import quote

import httpx

from cvsync.adapters.http_resilience import ResilientClient

from .schema import OlsTerm, OlsTermPage

if TYPE_CHECKING:
    from collections.abc import Callable

    from cvsync.config.http_resilience import ResilienceConfig
    from cvsync.config.ols import OlsConfig, OlsOntologyConfig

log = getLogger(__name__)


class OlsAPIError(RuntimeError):
    """Raised when OLS returns an unexpected response."""


class OlsRelation(StrEnum):
    """Hierarchy endpoints of a term; they follow ``is_a`` and ``part_of`` edges."""

    PARENTS = "hierarchicalParents"
    ANCESTORS = "hierarchicalAncestors"
    CHILDREN = "hierarchicalChildren"


def encode_iri(iri: str) -> str:
    """OLS expects term IRIs URL-encoded twice inside a path segment."""

    return quote(quote(iri, safe=""), safe="")


class OlsClient:
    """Low-level HTTP client for the OLS API."""

    def __init__(
        self,
        *,
        config: OlsConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    def fetch_term(self, ontology: OlsOntologyConfig, obo_id: str) -> OlsTerm | None:
        return asyncio.run(self._fetch_term_async(ontology, obo_id))

    def fetch_related(
        self,
        ontology: OlsOntologyConfig,
        term: OlsTerm,
        relation: OlsRelation,
    ) -> list[OlsTerm]:
        path = f"ontologies/{ontology.ols_name}/terms/{encode_iri(term.iri)}/{relation}"
        return asyncio.run(self._fetch_all_async(path, {}))

    def fetch_roots(self, ontology: OlsOntologyConfig) -> list[OlsTerm]:
        path = f"ontologies/{ontology.ols_name}/terms/roots"
        return asyncio.run(self._fetch_all_async(path, {}))

    async def _fetch_term_async(self, ontology: OlsOntologyConfig, obo_id: str) -> OlsTerm | None:
        async with self._client_factory(self._resilience) as client:
            page = await self._perform_request(
                client=client,
                path=f"ontologies/{ontology.ols_name}/terms",
                params={"obo_id": obo_id},
            )
        if page is None:
            return None
        for term in page.terms:
            if term.obo_id is not None and term.obo_id.upper() == obo_id.upper():
                return term
        return None

    async def _fetch_all_async(self, path: str, params: dict[str, str]) -> list[OlsTerm]:
        terms: list[OlsTerm] = []
        page_number = 0
        async with self._client_factory(self._resilience) as client:
            while True:
                page = await self._perform_request(
                    client=client,
                    path=path,
                    params={
                        **params,
                        "page": str(page_number),
                        "size": str(self._config.page_size),
                    },
                )
                if page is None:
                    break
                terms.extend(page.terms)
                if not page.has_next:
                    break
                page_number += 1
        return terms

    async def _perform_request(
        self,
        *,
        client: ResilientClient,
        path: str,
        params: dict[str, str],
    ) -> OlsTermPage | None:
        base_url = self._resilience.base_url
        if base_url is None:
            raise OlsAPIError("Missing OLS base_url in resilience configuration")
        response = await client.get(path, params=params)
        if response.status_code == httpx.codes.NOT_FOUND:
            log.debug("OLS has no resource at %s", path)
            return None
        response.raise_for_status()

        payload = response.json()
        if not isinstance(payload, dict):
            raise OlsAPIError("Unexpected OLS response payload")

        return OlsTermPage.model_validate(payload)
