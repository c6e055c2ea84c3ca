"""Client-credentials access to the Battle.net game-data (reference) endpoints."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import BaseModel, ValidationError

from rostersync.adapters.http_resilience import ResilientClient
from rostersync.config.blizzard import game_data_resilience_config
from rostersync.domain.ports.fetching import ReferenceDataFetcher

from .schema import PlayableClassIndex, PlayableRaceIndex, RealmIndex, TokenResponse
from .translator import translate_playable_classes, translate_playable_races, translate_realms

if TYPE_CHECKING:
    from collections.abc import Callable

    from rostersync.config.blizzard import BlizzardClientCredentials, BlizzardConfig
    from rostersync.config.http_resilience import ResilienceConfig
    from rostersync.domain.model import PlayableClass, PlayableRace, Realm

log = getLogger(__name__)

PLAYABLE_CLASS_INDEX_PATH = "/data/wow/playable-class/index"
PLAYABLE_RACE_INDEX_PATH = "/data/wow/playable-race/index"
REALM_INDEX_PATH = "/data/wow/realm/index"


class GameDataAPIError(RuntimeError):
    """Raised when the game-data API returns an unexpected response."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class BlizzardGameDataClient:
    """Fetch static reference data using an application access token."""

    def __init__(
        self,
        *,
        config: BlizzardConfig,
        credentials: BlizzardClientCredentials,
        resilience: ResilienceConfig | None = None,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._credentials = credentials
        self._resilience = resilience or game_data_resilience_config(config)
        self._client_factory = client_factory or ResilientClient
        self._access_token: str | None = None

    def fetch_playable_classes(self) -> list[PlayableClass]:
        index = asyncio.run(
            self._fetch_index_async(
                PLAYABLE_CLASS_INDEX_PATH, self._config.static_namespace, PlayableClassIndex
            )
        )
        return translate_playable_classes(index, locale=self._config.locale)

    def fetch_playable_races(self) -> list[PlayableRace]:
        index = asyncio.run(
            self._fetch_index_async(
                PLAYABLE_RACE_INDEX_PATH, self._config.static_namespace, PlayableRaceIndex
            )
        )
        return translate_playable_races(index, locale=self._config.locale)

    def fetch_realms(self) -> list[Realm]:
        index = asyncio.run(
            self._fetch_index_async(REALM_INDEX_PATH, self._config.dynamic_namespace, RealmIndex)
        )
        return translate_realms(index, locale=self._config.locale, region=self._config.region)

    async def _fetch_index_async[TModel: BaseModel](
        self,
        path: str,
        namespace: str,
        model: type[TModel],
    ) -> TModel:
        async with self._client_factory(self._resilience) as client:
            token = await self._ensure_token(client)
            response = await client.get(
                path,
                params={"namespace": namespace, "locale": self._config.locale},
                headers={"Authorization": f"Bearer {token}"},
            )
            payload = _json_payload(response, path)
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise GameDataAPIError(f"Unexpected payload from {path}: {exc}") from exc

    async def _ensure_token(self, client: ResilientClient) -> str:
        if self._access_token is not None:
            return self._access_token
        response = await client.post(
            self._credentials.token_url,
            data={"grant_type": "client_credentials"},
            auth=httpx.BasicAuth(self._credentials.client_id, self._credentials.client_secret),
        )
        payload = _json_payload(response, self._credentials.token_url)
        try:
            token = TokenResponse.model_validate(payload)
        except ValidationError as exc:
            raise GameDataAPIError("Token response did not contain an access token") from exc
        log.info("Obtained Battle.net client token")
        self._access_token = token.access_token
        return token.access_token


def _json_payload(response: httpx.Response, url: str) -> dict[str, object]:
    if response.is_error:
        log.error("Battle.net request %s failed with status %s", url, response.status_code)
        raise GameDataAPIError(
            f"Battle.net returned {response.status_code} for {url}",
            status_code=response.status_code,
        )
    try:
        payload = response.json()
    except ValueError as exc:
        raise GameDataAPIError(f"Invalid JSON from {url}") from exc
    if not isinstance(payload, dict):
        raise GameDataAPIError(f"Unexpected payload type from {url}")
    return payload


if TYPE_CHECKING:
    from rostersync.config.blizzard import BlizzardClientCredentials as _Credentials
    from rostersync.config.blizzard import BlizzardConfig as _BlizzardConfig

    _fetcher_check: ReferenceDataFetcher = BlizzardGameDataClient(
        config=_BlizzardConfig(),
        credentials=_Credentials(client_id="", client_secret=""),
    )
