"""HTTP client for the Battle.net account and character profile endpoints."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from rostersync.adapters.http_resilience import ResilientClient
from rostersync.config.blizzard import profile_resilience_config
from rostersync.domain.ports.fetching import (
    ProfileFetcher,
    ProfileFetchError,
    UnauthorizedError,
    UpstreamUnavailableError,
)

from .schema import AccountProfilePayload, CharacterProfilePayload
from .translator import flatten_account_roster, guild_from_character_profile

if TYPE_CHECKING:
    from collections.abc import Callable

    from rostersync.config.blizzard import BlizzardConfig
    from rostersync.config.http_resilience import ResilienceConfig
    from rostersync.domain.reconciliation.contracts import (
        RemoteCharacterSummary,
        RemoteGuildSummary,
    )

log = getLogger(__name__)

ACCOUNT_PROFILE_PATH = "/profile/user/wow"
_AUTH_FAILURE_STATUSES = frozenset({401, 403})


def character_profile_path(realm_slug: str, name: str) -> str:
    return f"/profile/wow/character/{quote(realm_slug.lower())}/{quote(name.lower())}"


class BlizzardProfileClient:
    """Bearer-token client for a user's World of Warcraft profile."""

    def __init__(
        self,
        *,
        config: BlizzardConfig,
        resilience: ResilienceConfig | None = None,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = resilience or profile_resilience_config(config)
        self._client_factory = client_factory or ResilientClient

    @property
    def region(self) -> str:
        return self._config.region

    def fetch_account_roster(self, token: str) -> list[RemoteCharacterSummary]:
        """Return every character on every game account of the token's owner.

        Raises :class:`UnauthorizedError` when the token is rejected and
        :class:`UpstreamUnavailableError` on any other failure.
        """

        return asyncio.run(self._fetch_account_roster_async(token))

    def fetch_character_detail(
        self, token: str, realm_slug: str, name: str
    ) -> RemoteGuildSummary | None:
        """Return the character's guild, or ``None`` when guildless or the fetch fails."""

        try:
            return asyncio.run(self._fetch_character_detail_async(token, realm_slug, name))
        except ProfileFetchError as exc:
            log.warning("Could not fetch profile for character %s-%s: %s", name, realm_slug, exc)
            return None

    async def _fetch_account_roster_async(self, token: str) -> list[RemoteCharacterSummary]:
        async with self._client_factory(self._resilience) as client:
            payload = await self._perform_request(
                client=client, path=ACCOUNT_PROFILE_PATH, token=token
            )
        try:
            profile = AccountProfilePayload.model_validate(payload)
        except ValidationError as exc:
            raise UpstreamUnavailableError(f"Unexpected account profile payload: {exc}") from exc
        return flatten_account_roster(profile, region=self.region)

    async def _fetch_character_detail_async(
        self, token: str, realm_slug: str, name: str
    ) -> RemoteGuildSummary | None:
        async with self._client_factory(self._resilience) as client:
            payload = await self._perform_request(
                client=client,
                path=character_profile_path(realm_slug, name),
                token=token,
            )
        try:
            profile = CharacterProfilePayload.model_validate(payload)
        except ValidationError as exc:
            raise UpstreamUnavailableError(f"Unexpected character profile payload: {exc}") from exc
        guild = guild_from_character_profile(profile, region=self.region)
        if guild is None:
            log.debug("Character %s-%s has no guild", name, realm_slug)
        return guild

    async def _perform_request(
        self,
        *,
        client: ResilientClient,
        path: str,
        token: str,
    ) -> dict[str, object]:
        params = {"namespace": self._config.profile_namespace, "locale": self._config.locale}
        headers = {"Authorization": f"Bearer {token}"}
        try:
            response = await client.get(path, params=params, headers=headers)
        except httpx.HTTPError as exc:
            raise UpstreamUnavailableError(f"Request to {path} failed: {exc}") from exc

        if response.status_code in _AUTH_FAILURE_STATUSES:
            raise UnauthorizedError(f"Access token rejected ({response.status_code}) for {path}")
        if response.is_error:
            log.error("Battle.net request %s failed with status %s", path, response.status_code)
            raise UpstreamUnavailableError(
                f"Battle.net returned {response.status_code} for {path}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamUnavailableError(f"Invalid JSON from {path}") from exc
        if not isinstance(payload, dict):
            raise UpstreamUnavailableError(f"Unexpected payload type from {path}")
        return payload


if TYPE_CHECKING:
    from rostersync.config.blizzard import BlizzardConfig as _BlizzardConfig

    _fetcher_check: ProfileFetcher = BlizzardProfileClient(config=_BlizzardConfig())
