"""Retry, pacing and caching settings for outbound HTTP clients."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

import httpx

CachePredicate = Callable[[object], bool]

TRANSIENT_STATUSES: frozenset[int] = frozenset({429, 500, 502, 503, 504})
TRANSIENT_ERRORS: tuple[type[httpx.HTTPError], ...] = (
    httpx.TimeoutException,
    httpx.NetworkError,
    httpx.RemoteProtocolError,
)


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """Exponential backoff for idempotent reads; ``total=0`` disables retries."""

    total: int = 4
    backoff_factor: float = 0.5
    max_backoff_wait: float = 60.0
    status_forcelist: frozenset[int] = TRANSIENT_STATUSES
    retry_on_exceptions: tuple[type[httpx.HTTPError], ...] = TRANSIENT_ERRORS


@dataclass(slots=True, frozen=True)
class RateLimit:
    """At most ``max_calls`` requests per ``per_seconds`` window."""

    max_calls: int
    per_seconds: float

    @classmethod
    def min_delay(cls, seconds: float) -> RateLimit:
        return cls(max_calls=1, per_seconds=seconds)


@dataclass(slots=True, frozen=True)
class CacheConfig:
    """On-disk response cache; ``should_cache`` sees the decoded JSON body."""

    sqlite_path: str | None = None
    ttl_seconds: float | None = None
    should_cache: CachePredicate | None = None


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    base_url: str
    timeout_seconds: float = 30.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
    cache: CacheConfig | None = None
    user_agent: str | None = None

    def headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.user_agent:
            headers["User-Agent"] = self.user_agent
        return headers
