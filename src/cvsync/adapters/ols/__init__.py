"""OLS (EBI Ontology Lookup Service) adapter."""

from __future__ import annotations

from .client import OlsAPIError, OlsClient, OlsRelation
from .source import OlsOntologySource, build_ols_sources
from .translator import TranslationError, translate_term

__all__ = [
    "OlsAPIError",
    "OlsClient",
    "OlsOntologySource",
    "OlsRelation",
    "TranslationError",
    "build_ols_sources",
    "translate_term",
]
