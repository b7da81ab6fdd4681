"""Retry, throttling and caching settings shared by every feed client."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final, Literal

import httpx

if TYPE_CHECKING:
    from collections.abc import Mapping

ResponseHook = Callable[[httpx.Response], Awaitable[None] | None]

# data.gouv.fr, senat.fr and the SPARQL endpoint all shed load with these
RETRYABLE_STATUSES: Final = frozenset({429, 500, 502, 503, 504})
# SPARQL queries go out as POST; nothing elusync sends mutates remote state
REPLAYABLE_METHODS: Final = frozenset({"GET", "HEAD", "OPTIONS", "POST"})
TRANSIENT_ERRORS: Final[tuple[type[httpx.HTTPError], ...]] = (
    httpx.TimeoutException,
    httpx.NetworkError,
    httpx.RemoteProtocolError,
)


class RetryablePayloadError(httpx.HTTPError):
    """A 200 response whose body says the upstream gave up (e.g. a query timeout)."""

    def __init__(self, message: str, *, response: httpx.Response) -> None:
        super().__init__(message)
        self.response = response


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    total: int = 3
    backoff_factor: float = 1.0
    max_backoff_wait: float = 60.0
    backoff_jitter: float = 1.0
    respect_retry_after_header: bool = True
    allowed_methods: frozenset[str] = REPLAYABLE_METHODS
    status_forcelist: frozenset[int] = RETRYABLE_STATUSES
    retry_on_exceptions: tuple[type[httpx.HTTPError], ...] = TRANSIENT_ERRORS


@dataclass(slots=True, frozen=True)
class RateLimit:
    """At most ``max_calls`` requests per ``per_seconds`` window."""

    max_calls: int
    per_seconds: float

    @classmethod
    def min_interval(cls, seconds: float) -> RateLimit:
        return cls(max_calls=1, per_seconds=seconds)


@dataclass(slots=True, frozen=True)
class CacheConfig:
    """hishel storage settings; ``sqlite_path=None`` means the data-dir cache file."""

    enabled: bool = True
    backend: Literal["sqlite", "memory"] = "memory"
    sqlite_path: str | None = None
    default_ttl_seconds: float | None = None
    refresh_ttl_on_access: bool = True

    @classmethod
    def on_disk(cls, ttl_seconds: float) -> CacheConfig:
        return cls(backend="sqlite", default_ttl_seconds=ttl_seconds)


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    base_url: str | None = None
    timeout_seconds: float = 60.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
    cache: CacheConfig | None = None
    response_hooks: tuple[ResponseHook, ...] = ()
    default_headers: Mapping[str, str] | None = None
    auth: httpx.Auth | None = None
