"""Rate limited, retrying and caching HTTP client used by the OLS adapter.

Requests pass the ``aiolimiter`` limiter first, then the ``hishel`` cache, and
only cache misses reach the ``httpx-retries`` transport. Tests inject an
``httpx.MockTransport`` underneath the retries through ``transport=``.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, TypedDict, Unpack

import httpx
from aiolimiter import AsyncLimiter
from hishel import AsyncSqliteStorage, FilterPolicy
from hishel import Response as HishelCacheResponse
from hishel._policies import BaseFilter
from hishel.httpx import AsyncCacheClient
from httpx_retries import Retry, RetryTransport

from cvsync.config import get_storage_config

if TYPE_CHECKING:
    from types import TracebackType

    from httpx._client import UseClientDefault
    from httpx._types import HeaderTypes, QueryParamTypes, TimeoutTypes, URLTypes

    from cvsync.config.http_resilience import CacheConfig, ResilienceConfig, RetryPolicy

log = getLogger(__name__)


class GetOptions(TypedDict, total=False):
    params: QueryParamTypes | None
    headers: HeaderTypes | None
    timeout: TimeoutTypes | UseClientDefault


def build_retry(policy: RetryPolicy) -> Retry:
    return Retry(
        total=policy.total,
        backoff_factor=policy.backoff_factor,
        max_backoff_wait=policy.max_backoff_wait,
        backoff_jitter=policy.backoff_jitter,
        respect_retry_after_header=policy.respect_retry_after_header,
        allowed_methods=tuple(policy.allowed_methods),
        status_forcelist=tuple(policy.status_forcelist),
        retry_on_exceptions=policy.retry_on_exceptions,
    )


class _SuccessfulResponseFilter(BaseFilter[HishelCacheResponse]):
    """Only let 2xx responses into the cache."""

    def needs_body(self) -> bool:
        return False

    def apply(self, item: HishelCacheResponse, body: bytes | None) -> bool:  # noqa: ARG002
        return httpx.codes.is_success(item.status_code)


def build_cache_storage(config: CacheConfig) -> AsyncSqliteStorage:
    if config.backend == "memory":
        database_path = ":memory:"
    elif config.backend == "sqlite":
        database_path = config.sqlite_path or str(get_storage_config().http_cache_path())
    else:
        raise ValueError(f"Unsupported cache backend: {config.backend}")
    return AsyncSqliteStorage(database_path=database_path, default_ttl=config.ttl_seconds)


class ResilientClient:
    """Async GET-only client configured from a ``ResilienceConfig``."""

    def __init__(
        self,
        config: ResilienceConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._limiter = (
            AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)
            if config.ratelimit is not None
            else None
        )
        options: dict[str, object] = {
            "timeout": config.timeout_seconds,
            "transport": RetryTransport(transport=transport, retry=build_retry(config.retry)),
            "headers": dict(config.default_headers or {}),
        }
        if config.base_url is not None:
            options["base_url"] = config.base_url

        self._client: httpx.AsyncClient
        if config.cache is None:
            self._client = httpx.AsyncClient(**options)  # type: ignore[arg-type]
        else:
            policy = (
                FilterPolicy(response_filters=[_SuccessfulResponseFilter()])
                if config.cache.successful_only
                else None
            )
            self._client = AsyncCacheClient(  # type: ignore[arg-type]
                **options, storage=build_cache_storage(config.cache), policy=policy
            )

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get(self, url: URLTypes, **kwargs: Unpack[GetOptions]) -> httpx.Response:
        log.debug("%s GET %s", self.config.name, url)
        if self._limiter is None:
            return await self._client.get(url, **kwargs)
        async with self._limiter:
            return await self._client.get(url, **kwargs)
