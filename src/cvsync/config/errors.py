"""Errors raised while reading the cvsync configuration."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when configuration values are invalid."""


class UnknownOntologyError(ConfigurationError):
    """Raised when a run names an ontology no source is configured for."""
