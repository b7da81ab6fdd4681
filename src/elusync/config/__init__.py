"""Application configuration helpers."""

from __future__ import annotations

from .env import env_flag, env_float, env_or_default, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import (
    CacheConfig,
    RateLimit,
    ResilienceConfig,
    RetryablePayloadError,
    RetryPolicy,
)
from .sources import (
    JudilibreConfig,
    SourceConfig,
    get_deputies_source,
    get_europarl_source,
    get_government_source,
    get_hatvp_source,
    get_judilibre_config,
    get_mayors_source,
    get_senate_votes_source,
    get_senators_source,
    get_wikidata_source,
)
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config
from .sync import ERROR_SAMPLE_SIZE, SyncConfig, get_sync_config

__all__ = [
    "ERROR_SAMPLE_SIZE",
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "JudilibreConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "RetryablePayloadError",
    "SourceConfig",
    "StorageConfig",
    "SyncConfig",
    "env_flag",
    "env_float",
    "env_or_default",
    "get_database_config",
    "get_deputies_source",
    "get_europarl_source",
    "get_government_source",
    "get_hatvp_source",
    "get_judilibre_config",
    "get_mayors_source",
    "get_senate_votes_source",
    "get_senators_source",
    "get_storage_config",
    "get_sync_config",
    "get_wikidata_source",
    "require_env_vars",
]
