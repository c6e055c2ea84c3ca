"""Battle.net API configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, positive_int_env_var, require_env_vars
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_REGION = "us"
DEFAULT_LOCALE = "en_US"
DEFAULT_DETAIL_CONCURRENCY = 1
BLIZZARD_TOKEN_URL = "https://oauth.battle.net/token"
BLIZZARD_TIMEOUT_SECONDS = 15.0


def api_base_url(region: str) -> str:
    return f"https://{region}.api.blizzard.com"


@dataclass(frozen=True, slots=True)
class BlizzardConfig:
    """Region-scoped settings shared by the profile and game-data clients."""

    region: str = DEFAULT_REGION
    locale: str = DEFAULT_LOCALE

    @property
    def profile_namespace(self) -> str:
        return f"profile-{self.region}"

    @property
    def static_namespace(self) -> str:
        return f"static-{self.region}"

    @property
    def dynamic_namespace(self) -> str:
        return f"dynamic-{self.region}"


@dataclass(frozen=True, slots=True)
class BlizzardClientCredentials:
    client_id: str
    client_secret: str
    token_url: str = BLIZZARD_TOKEN_URL


@dataclass(frozen=True, slots=True)
class ReconcileConfig:
    """Knobs for a single profile reconciliation run."""

    detail_concurrency: int = DEFAULT_DETAIL_CONCURRENCY


def get_blizzard_config() -> BlizzardConfig:
    return BlizzardConfig(
        region=optional_env_var("BLIZZARD_API_REGION", DEFAULT_REGION).lower(),
        locale=optional_env_var("BLIZZARD_API_LOCALE", DEFAULT_LOCALE),
    )


def get_client_credentials() -> BlizzardClientCredentials:
    values = require_env_vars(("BLIZZARD_CLIENT_ID", "BLIZZARD_CLIENT_SECRET"))
    return BlizzardClientCredentials(
        client_id=values["BLIZZARD_CLIENT_ID"],
        client_secret=values["BLIZZARD_CLIENT_SECRET"],
    )


def get_reconcile_config() -> ReconcileConfig:
    return ReconcileConfig(
        detail_concurrency=positive_int_env_var(
            "RECONCILE_DETAIL_CONCURRENCY", DEFAULT_DETAIL_CONCURRENCY
        )
    )


def profile_resilience_config(config: BlizzardConfig) -> ResilienceConfig:
    # profile data is per-user and must never be served from cache
    return ResilienceConfig(
        name="blizzard-profile",
        base_url=api_base_url(config.region),
        timeout_seconds=BLIZZARD_TIMEOUT_SECONDS,
        retry=RetryPolicy(total=2),
        ratelimit=RateLimit(max_calls=25, per_seconds=1.0),
        cache=None,
    )


def game_data_resilience_config(config: BlizzardConfig) -> ResilienceConfig:
    return ResilienceConfig(
        name="blizzard-game-data",
        base_url=api_base_url(config.region),
        timeout_seconds=BLIZZARD_TIMEOUT_SECONDS,
        ratelimit=RateLimit(max_calls=25, per_seconds=1.0),
        cache=CacheConfig(enabled=True, backend="memory"),
    )
