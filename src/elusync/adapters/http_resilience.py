"""The one HTTP client every feed adapter downloads through."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from logging import getLogger
from typing import TYPE_CHECKING, TypedDict, Unpack

import httpx
from aiolimiter import AsyncLimiter
from hishel import AsyncSqliteStorage
from hishel.httpx import AsyncCacheClient
from httpx_retries import Retry, RetryTransport

from elusync.config import (
    CacheConfig,
    RateLimit,
    ResilienceConfig,
    RetryablePayloadError,
    RetryPolicy,
)
from elusync.config.storage import get_storage_config

if TYPE_CHECKING:
    from types import TracebackType

    from httpx._types import HeaderTypes, QueryParamTypes, TimeoutTypes

__all__ = [
    "CacheConfig",
    "RateLimit",
    "ResilienceConfig",
    "ResilientClient",
    "RetryPolicy",
    "RetryablePayloadError",
    "backoff_delay",
    "build_limiter",
]

log = getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]
Delay = Callable[[int], float]


class GetOptions(TypedDict, total=False):
    params: QueryParamTypes | None
    headers: HeaderTypes | None


class AsyncClientOptions(TypedDict, total=False):
    base_url: str
    timeout: TimeoutTypes
    headers: HeaderTypes
    event_hooks: dict[str, list[Callable[[httpx.Response], object]]]
    transport: httpx.AsyncBaseTransport
    follow_redirects: bool
    auth: httpx.Auth


def backoff_delay(attempt: int, *, factor: float, maximum: float) -> float:
    """Delay before retry number ``attempt`` (1-based): ``factor * 2**(attempt-1)``, capped."""
    if attempt < 1:
        return 0.0
    return min(factor * (2 ** (attempt - 1)), maximum)


def build_limiter(ratelimit: RateLimit | None) -> AsyncLimiter | None:
    """One limiter per client unless callers share one across clients."""
    if ratelimit is None:
        return None
    return AsyncLimiter(ratelimit.max_calls, ratelimit.per_seconds)


def _transport(policy: RetryPolicy) -> RetryTransport:
    retry = Retry(
        total=policy.total,
        backoff_factor=policy.backoff_factor,
        max_backoff_wait=policy.max_backoff_wait,
        backoff_jitter=policy.backoff_jitter,
        respect_retry_after_header=policy.respect_retry_after_header,
        allowed_methods=tuple(policy.allowed_methods),
        status_forcelist=tuple(policy.status_forcelist),
        retry_on_exceptions=policy.retry_on_exceptions,
    )
    return RetryTransport(retry=retry)


def _cache_storage(config: CacheConfig | None) -> AsyncSqliteStorage | None:
    if config is None or not config.enabled:
        return None
    match config.backend:
        case "memory":
            database_path = ":memory:"
        case "sqlite":
            database_path = config.sqlite_path or str(get_storage_config().http_cache_path())
        case other:
            raise ValueError(f"Unsupported cache backend: {other}")
    return AsyncSqliteStorage(
        database_path=database_path,
        default_ttl=config.default_ttl_seconds,
        refresh_ttl_on_access=config.refresh_ttl_on_access,
    )


class ResilientClient:
    """GET-only async client: throttled, retried and optionally cached.

    ``httpx_retries`` handles timeouts and 429/5xx below the client. A response
    hook can raise :class:`RetryablePayloadError` for a 200 whose body reports
    an upstream failure; those are retried here, with the same backoff, because
    they surface above the transport.
    """

    def __init__(
        self,
        config: ResilienceConfig,
        *,
        sleep: Sleep = asyncio.sleep,
        delay: Delay | None = None,
        limiter: AsyncLimiter | None = None,
    ) -> None:
        self.config = config
        self._sleep = sleep
        self._delay = delay or self._policy_delay
        self._limiter = limiter if limiter is not None else build_limiter(config.ratelimit)

        options: AsyncClientOptions = {
            "timeout": config.timeout_seconds,
            "transport": _transport(config.retry),
            "follow_redirects": True,
        }
        if config.base_url is not None:
            options["base_url"] = config.base_url
        if config.default_headers:
            options["headers"] = dict(config.default_headers)
        if config.response_hooks:
            options["event_hooks"] = {"response": list(config.response_hooks)}
        if config.auth is not None:
            options["auth"] = config.auth

        storage = _cache_storage(config.cache)
        self._client: httpx.AsyncClient = (
            AsyncCacheClient(**options, storage=storage)
            if storage is not None
            else httpx.AsyncClient(**options)
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

    async def get(self, url: str, **options: Unpack[GetOptions]) -> httpx.Response:
        attempt = 0
        while True:
            try:
                return await self._throttled_get(url, options)
            except RetryablePayloadError as exc:
                attempt += 1
                if attempt > self.config.retry.total:
                    raise
                wait = self._delay(attempt)
                log.warning(
                    "%s: retryable payload (%s), attempt %s/%s in %.1fs",
                    self.config.name,
                    exc,
                    attempt,
                    self.config.retry.total,
                    wait,
                )
                await self._sleep(wait)

    async def _throttled_get(self, url: str, options: GetOptions) -> httpx.Response:
        if self._limiter is None:
            return await self._client.get(url, **options)
        async with self._limiter:
            return await self._client.get(url, **options)

    def _policy_delay(self, attempt: int) -> float:
        policy = self.config.retry
        return backoff_delay(attempt, factor=policy.backoff_factor, maximum=policy.max_backoff_wait)
