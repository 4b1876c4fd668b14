"""Application configuration helpers."""

from __future__ import annotations

from .env import env_flag, env_list
from .errors import ConfigurationError, UnknownOntologyError
from .http_resilience import (
    CacheConfig,
    RateLimit,
    ResilienceConfig,
    RetryPolicy,
)
from .logging import configure_logging, resolve_log_level
from .ols import OlsConfig, OlsOntologyConfig, get_ols_config
from .storage import (
    DatabaseConfig,
    StorageConfig,
    get_database_config,
    get_database_uri,
    get_storage_config,
)
from .sync import SyncConfig, get_sync_config

__all__ = [
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "OlsConfig",
    "OlsOntologyConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "SyncConfig",
    "UnknownOntologyError",
    "configure_logging",
    "env_flag",
    "env_list",
    "get_database_config",
    "get_database_uri",
    "get_ols_config",
    "get_storage_config",
    "get_sync_config",
    "resolve_log_level",
]
