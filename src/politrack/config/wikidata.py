"""Wikidata client configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_float, require_env_vars
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .storage import get_storage_config

DEFAULT_WIKIDATA_BASE_URL = "https://www.wikidata.org/w/"
WIKIDATA_API_PATH = "api.php"
# wbgetentities refuses more ids per call for anonymous clients
WIKIDATA_MAX_IDS_PER_CALL = 50
DEFAULT_WIKIDATA_MIN_DELAY_SECONDS = 0.2
DEFAULT_WIKIDATA_LANGUAGE = "fr"
HTTP_CACHE_TTL_SECONDS = 24 * 3600


@dataclass(frozen=True, slots=True)
class WikidataConfig:
    resilience: ResilienceConfig
    batch_size: int = WIKIDATA_MAX_IDS_PER_CALL
    language: str = DEFAULT_WIKIDATA_LANGUAGE
    search_limit: int = 5


def _cacheable(payload: object) -> bool:
    # API errors come back as HTTP 200 with an "error" object
    return not (isinstance(payload, dict) and "error" in payload)


def get_wikidata_config() -> WikidataConfig:
    """Build the client settings; ``POLITRACK_CONTACT`` goes into the User-Agent."""

    contact = require_env_vars(("POLITRACK_CONTACT",))["POLITRACK_CONTACT"]
    min_delay = env_float("POLITRACK_WIKIDATA_MIN_DELAY", DEFAULT_WIKIDATA_MIN_DELAY_SECONDS)
    storage = get_storage_config()

    return WikidataConfig(
        resilience=ResilienceConfig(
            name="wikidata",
            base_url=DEFAULT_WIKIDATA_BASE_URL,
            retry=RetryPolicy(total=3),
            ratelimit=RateLimit.min_delay(min_delay),
            cache=CacheConfig(
                sqlite_path=str(storage.http_cache_path()),
                ttl_seconds=HTTP_CACHE_TTL_SECONDS,
                should_cache=_cacheable,
            ),
            user_agent=f"politrack/1.0 ({contact})",
        )
    )
