"""Application configuration helpers."""

from __future__ import annotations

from .blizzard import (
    BlizzardClientCredentials,
    BlizzardConfig,
    ReconcileConfig,
    game_data_resilience_config,
    get_blizzard_config,
    get_client_credentials,
    get_reconcile_config,
    profile_resilience_config,
)
from .env import optional_env_var, positive_int_env_var, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "BlizzardClientCredentials",
    "BlizzardConfig",
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ReconcileConfig",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "configure_logging",
    "game_data_resilience_config",
    "get_blizzard_config",
    "get_client_credentials",
    "get_database_config",
    "get_reconcile_config",
    "get_storage_config",
    "optional_env_var",
    "positive_int_env_var",
    "profile_resilience_config",
    "require_env_var",
    "require_env_vars",
]
