"""Reusable fakes and builders for profile reconciliation tests."""

from __future__ import annotations

import time
from threading import Lock
from typing import TYPE_CHECKING

from rostersync.domain.model import Faction, User
from rostersync.domain.ports.fetching import ProfileFetcher
from rostersync.domain.reconciliation import RemoteCharacterSummary, RemoteGuildSummary

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping


def make_character(
    name: str,
    realm_slug: str = "area-52",
    *,
    level: int = 70,
    class_id: int = 1,
    race_id: int = 2,
    region: str = "us",
) -> RemoteCharacterSummary:
    return RemoteCharacterSummary(
        name=name,
        realm_slug=realm_slug,
        class_id=class_id,
        race_id=race_id,
        level=level,
        region=region,
    )


def make_guild(
    name: str,
    realm_slug: str = "area-52",
    *,
    region: str = "us",
    faction: Faction | None = Faction.HORDE,
) -> RemoteGuildSummary:
    return RemoteGuildSummary(name=name, realm_slug=realm_slug, region=region, faction=faction)


def make_user(
    battletag: str = "Player#1234",
    *,
    battlenet_id: int = 1234,
    access_token: str | None = "token",  # noqa: S107
) -> User:
    return User(battlenet_id=battlenet_id, battletag=battletag, access_token=access_token)


class FakeProfileFetcher(ProfileFetcher):
    """In-memory profile fetcher keyed by ``(realm_slug, lowercased name)``."""

    def __init__(
        self,
        roster: Iterable[RemoteCharacterSummary] = (),
        *,
        guilds: Mapping[tuple[str, str], RemoteGuildSummary | None] | None = None,
        roster_error: Exception | None = None,
        failing_details: Iterable[tuple[str, str]] = (),
    ) -> None:
        self.roster = list(roster)
        self.guilds = dict(guilds or {})
        self.roster_error = roster_error
        self.failing_details = set(failing_details)
        self.roster_calls: list[str] = []
        self.detail_calls: list[tuple[str, str]] = []
        self._lock = Lock()

    def fetch_account_roster(self, token: str) -> list[RemoteCharacterSummary]:
        self.roster_calls.append(token)
        if self.roster_error is not None:
            raise self.roster_error
        return list(self.roster)

    def fetch_character_detail(
        self, token: str, realm_slug: str, name: str
    ) -> RemoteGuildSummary | None:
        del token
        key = (realm_slug, name.lower())
        with self._lock:
            self.detail_calls.append(key)
        if key in self.failing_details:
            raise RuntimeError(f"detail fetch failed for {name}")
        return self.guilds.get(key)


class SlowRosterFetcher(FakeProfileFetcher):
    """Records how many roster fetches overlap in time."""

    def __init__(self, roster: Iterable[RemoteCharacterSummary], *, delay: float = 0.05) -> None:
        super().__init__(roster)
        self.delay = delay
        self.active = 0
        self.max_active = 0

    def fetch_account_roster(self, token: str) -> list[RemoteCharacterSummary]:
        with self._lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        time.sleep(self.delay)
        with self._lock:
            self.active -= 1
            return super().fetch_account_roster(token)


def account_profile_payload(*accounts: Iterable[Mapping[str, object]]) -> dict[str, object]:
    return {
        "id": 1234,
        "wow_accounts": [
            {"id": index, "characters": list(characters)}
            for index, characters in enumerate(accounts, start=1)
        ],
    }


def character_summary_payload(
    name: str,
    realm_slug: str = "area-52",
    *,
    level: int = 70,
    class_id: int = 1,
    race_id: int = 2,
) -> dict[str, object]:
    return {
        "character": {"href": "https://example.invalid"},
        "protected_character": {"href": "https://example.invalid"},
        "name": name,
        "id": 1,
        "realm": {"name": realm_slug.title(), "id": 3676, "slug": realm_slug},
        "playable_class": {"name": "Warrior", "id": class_id},
        "playable_race": {"name": "Orc", "id": race_id},
        "gender": {"type": "MALE", "name": "Male"},
        "faction": {"type": "HORDE", "name": "Horde"},
        "level": level,
    }


def character_profile_payload(
    name: str,
    realm_slug: str = "area-52",
    *,
    guild_name: str | None = None,
    guild_realm_slug: str | None = None,
    faction: str = "HORDE",
) -> dict[str, object]:
    payload: dict[str, object] = {
        "id": 1,
        "name": name,
        "realm": {"name": realm_slug.title(), "id": 3676, "slug": realm_slug},
        "faction": {"type": faction, "name": faction.title()},
        "level": 70,
    }
    if guild_name is not None:
        payload["guild"] = {
            "key": {"href": "https://example.invalid"},
            "name": guild_name,
            "id": 42,
            "realm": {
                "name": (guild_realm_slug or realm_slug).title(),
                "id": 3676,
                "slug": guild_realm_slug or realm_slug,
            },
        }
    return payload
