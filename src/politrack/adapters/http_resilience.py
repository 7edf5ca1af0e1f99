"""Async HTTP client with retries, request pacing and an optional response cache."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import TYPE_CHECKING

import httpx
from aiolimiter import AsyncLimiter
from hishel import AsyncSqliteStorage, FilterPolicy
from hishel import Response as HishelCacheResponse
from hishel._policies import BaseFilter
from hishel.httpx import AsyncCacheClient
from httpx_retries import Retry, RetryTransport

if TYPE_CHECKING:
    from types import TracebackType

    from collections.abc import Awaitable, Callable

    from politrack.config import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
    from politrack.config.http_resilience import CachePredicate

log = logging.getLogger(__name__)


def build_retry(policy: RetryPolicy) -> Retry:
    return Retry(
        total=policy.total,
        backoff_factor=policy.backoff_factor,
        max_backoff_wait=policy.max_backoff_wait,
        respect_retry_after_header=True,
        allowed_methods=("GET",),
        status_forcelist=tuple(sorted(policy.status_forcelist)),
        retry_on_exceptions=policy.retry_on_exceptions,
    )


class JsonBodyFilter(BaseFilter[HishelCacheResponse]):
    """Keep a response in the cache only when ``predicate`` accepts its JSON body.

    Bodies that are not JSON are cached as-is.
    """

    def __init__(self, predicate: CachePredicate) -> None:
        self._predicate = predicate

    def needs_body(self) -> bool:
        return True

    def apply(self, item: HishelCacheResponse, body: bytes | None) -> bool:
        del item
        if body is None:
            return True
        try:
            payload = json.loads(body)
        except ValueError:
            return True
        return bool(self._predicate(payload))


class RequestPacer:
    """Keeps successive requests at least ``interval`` seconds apart.

    Unlike the limiter of a single ``ResilientClient``, a pacer keeps its state
    across clients and event loops.
    """

    def __init__(
        self,
        interval: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.interval = interval
        self._clock = clock
        self._sleep = sleep
        self._next_slot: float | None = None

    @classmethod
    def from_ratelimit(cls, ratelimit: RateLimit | None) -> RequestPacer | None:
        if ratelimit is None or ratelimit.per_seconds <= 0:
            return None
        return cls(ratelimit.per_seconds / max(ratelimit.max_calls, 1))

    async def wait(self) -> None:
        now = self._clock()
        slot = now if self._next_slot is None else max(now, self._next_slot)
        if slot > now:
            await self._sleep(slot - now)
        self._next_slot = slot + self.interval


def _cache_storage(config: CacheConfig) -> AsyncSqliteStorage:
    return AsyncSqliteStorage(
        database_path=config.sqlite_path or ":memory:",
        default_ttl=config.ttl_seconds,
        refresh_ttl_on_access=True,
    )


class ResilientClient:
    """One ``httpx.AsyncClient`` per ``async with`` block.

    Failed reads are retried by ``RetryTransport``; ``transport`` swaps out the
    network layer beneath it (tests pass an ``httpx.MockTransport``). When a rate
    limit is configured every request waits for a slot first.
    """

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
        retry_transport = RetryTransport(
            transport=transport or httpx.AsyncHTTPTransport(),
            retry=build_retry(config.retry),
        )
        options = {
            "base_url": config.base_url,
            "timeout": config.timeout_seconds,
            "headers": config.headers(),
            "transport": retry_transport,
        }
        if config.cache is None:
            self._client = httpx.AsyncClient(**options)
        else:
            policy = (
                FilterPolicy(response_filters=[JsonBodyFilter(config.cache.should_cache)])
                if config.cache.should_cache is not None
                else None
            )
            self._client = AsyncCacheClient(
                **options,
                storage=_cache_storage(config.cache),
                policy=policy,
            )
            log.debug("%s: caching responses in %s", config.name, config.cache.sqlite_path)

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self._client.aclose()

    async def get(self, url: str, *, params: dict[str, str] | None = None) -> httpx.Response:
        if self._limiter is None:
            return await self._client.get(url, params=params)
        async with self._limiter:
            return await self._client.get(url, params=params)
