"""Application configuration helpers."""

from __future__ import annotations

from .env import env_float, env_int, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError, StoreUnavailableError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config
from .sync import SyncConfig, get_sync_config
from .wikidata import WIKIDATA_MAX_IDS_PER_CALL, WikidataConfig, get_wikidata_config

__all__ = [
    "WIKIDATA_MAX_IDS_PER_CALL",
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "StoreUnavailableError",
    "SyncConfig",
    "WikidataConfig",
    "configure_logging",
    "env_float",
    "env_int",
    "get_database_config",
    "get_storage_config",
    "get_sync_config",
    "get_wikidata_config",
    "require_env_vars",
]
