from __future__ import annotations

import httpx
import pytest

from cvsync.adapters.ols import OlsAPIError, OlsClient, OlsRelation
from cvsync.adapters.ols.client import encode_iri
from cvsync.adapters.ols.schema import OlsTerm
from cvsync.config.http_resilience import ResilienceConfig
from cvsync.config.ols import OlsConfig, OlsOntologyConfig
from tests.support.ols_payloads import make_client_factory, ols_page, ols_term


def test_encode_iri_double_encodes() -> None:
    encoded = encode_iri("http://purl.obolibrary.org/obo/MI_0407")

    assert encoded == "http%253A%252F%252Fpurl.obolibrary.org%252Fobo%252FMI_0407"


def test_fetch_term_matches_obo_id(
    ols_config: OlsConfig, mi_ontology: OlsOntologyConfig
) -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(
            200,
            json=ols_page(ols_term("MI:04070", "other"), ols_term("MI:0407", "direct")),
        )

    client = OlsClient(config=ols_config, client_factory=make_client_factory(handler))

    term = client.fetch_term(mi_ontology, "mi:0407")

    assert term is not None
    assert term.label == "direct"
    [request] = requests
    assert request.url.path == "/api/ontologies/mi/terms"
    assert request.url.params["obo_id"] == "mi:0407"


def test_fetch_term_returns_none_when_missing(
    ols_config: OlsConfig, mi_ontology: OlsOntologyConfig
) -> None:
    client = OlsClient(
        config=ols_config,
        client_factory=make_client_factory(lambda request: httpx.Response(404)),
    )

    assert client.fetch_term(mi_ontology, "MI:9999") is None


def test_fetch_related_follows_pages(
    ols_config: OlsConfig, mi_ontology: OlsOntologyConfig
) -> None:
    pages = {
        "0": ols_page(
            ols_term("MI:0208", "genetic"), ols_term("MI:0407", "direct"), total_pages=2
        ),
        "1": ols_page(ols_term("MI:0915", "physical"), number=1, total_pages=2),
    }
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=pages[request.url.params["page"]])

    client = OlsClient(config=ols_config, client_factory=make_client_factory(handler))
    parent = OlsTerm.model_validate(ols_term("MI:0190", "interaction type"))

    children = client.fetch_related(mi_ontology, parent, OlsRelation.CHILDREN)

    assert [term.obo_id for term in children] == ["MI:0208", "MI:0407", "MI:0915"]
    assert [request.url.params["size"] for request in seen] == ["2", "2"]
    assert all(request.url.path.endswith("/hierarchicalChildren") for request in seen)


def test_server_errors_propagate(ols_config: OlsConfig, mi_ontology: OlsOntologyConfig) -> None:
    client = OlsClient(
        config=ols_config,
        client_factory=make_client_factory(lambda request: httpx.Response(500)),
    )

    with pytest.raises(httpx.HTTPStatusError):
        client.fetch_roots(mi_ontology)


def test_missing_base_url_is_rejected(mi_ontology: OlsOntologyConfig) -> None:
    config = OlsConfig(resilience=ResilienceConfig(name="ols-test", cache=None))
    client = OlsClient(
        config=config,
        client_factory=make_client_factory(lambda request: httpx.Response(200, json={})),
    )

    with pytest.raises(OlsAPIError):
        client.fetch_roots(mi_ontology)
