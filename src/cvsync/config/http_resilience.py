"""Retry, rate limit and cache settings for the HTTP clients of remote sources."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final, Literal

import httpx

if TYPE_CHECKING:
    from collections.abc import Mapping

# Ontology releases are at most daily; a cached term page stays valid that long.
ONE_DAY_SECONDS: Final[float] = 24 * 60 * 60.0


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    total: int = 4
    backoff_factor: float = 0.5
    max_backoff_wait: float = 60.0
    backoff_jitter: float = 1.0
    respect_retry_after_header: bool = True
    # Ontology lookups are read-only.
    allowed_methods: frozenset[str] = frozenset({"GET", "HEAD"})
    status_forcelist: frozenset[int] = frozenset({429, 500, 502, 503, 504})
    retry_on_exceptions: tuple[type[httpx.HTTPError], ...] = (
        httpx.TimeoutException,
        httpx.NetworkError,
        httpx.RemoteProtocolError,
    )


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float


@dataclass(slots=True, frozen=True)
class CacheConfig:
    """Response cache; ``sqlite_path`` defaults to the cache file of the data dir."""

    backend: Literal["sqlite", "memory"] = "sqlite"
    sqlite_path: str | None = None
    ttl_seconds: float | None = ONE_DAY_SECONDS
    # Error pages (a 404 for a term that is about to be released) must not stick.
    successful_only: bool = True


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    base_url: str | None = None
    timeout_seconds: float = 30.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
    cache: CacheConfig | None = field(default_factory=CacheConfig)
    default_headers: Mapping[str, str] | None = None
