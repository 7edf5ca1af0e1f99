from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest

from politrack.adapters.http_resilience import ResilientClient
from politrack.adapters.wikidata import WikidataClient
from politrack.config import RateLimit, ResilienceConfig, RetryPolicy, WikidataConfig

if TYPE_CHECKING:
    from collections.abc import Callable

type Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def make_client() -> Callable[..., WikidataClient]:
    def factory(
        handler: Handler, *, batch_size: int = 50, ratelimit: RateLimit | None = None
    ) -> WikidataClient:
        config = WikidataConfig(
            resilience=ResilienceConfig(
                name="wikidata-test",
                base_url="https://wikidata.test/w/",
                retry=RetryPolicy(total=0),
                ratelimit=ratelimit,
            ),
            batch_size=batch_size,
        )
        transport = httpx.MockTransport(handler)
        return WikidataClient(
            config=config,
            client_factory=lambda resilience: ResilientClient(resilience, transport=transport),
        )

    return factory
