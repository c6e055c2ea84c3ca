"""Account-owned entities: users, the characters they play and the guilds those join.

Characters and guilds are identified by a natural key of
``(name, realm_slug, region)``; the surrogate ``id`` only exists so that rows
can reference each other.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from rostersync.domain.model.base import Entity

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from rostersync.domain.model.enums import Faction

type NaturalKey = tuple[str, str, str]


@dataclass(eq=False, kw_only=True)
class User(Entity):
    battlenet_id: int
    battletag: str

    access_token: str | None = None
    refresh_token: str | None = None
    token_expires_at: datetime | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def display_tag(self) -> str:
        return self.battletag


@dataclass(eq=False, kw_only=True)
class Guild(Entity):
    name: str
    realm_slug: str
    region: str
    faction: Faction | None = None
    created_at: datetime | None = None


@dataclass(eq=False, kw_only=True)
class Character(Entity):
    name: str
    realm_slug: str
    region: str

    user_id: UUID | None = None
    guild_id: UUID | None = None

    level: int | None = None
    class_id: int | None = None
    race_id: int | None = None
    guild_rank: int | None = None
    last_updated: datetime | None = None
