"""Public interface for the Battle.net adapter."""

from __future__ import annotations

from .client import BlizzardProfileClient, character_profile_path
from .game_data import BlizzardGameDataClient, GameDataAPIError
from .schema import AccountProfilePayload, CharacterProfilePayload
from .translator import flatten_account_roster, guild_from_character_profile

__all__ = [
    "AccountProfilePayload",
    "BlizzardGameDataClient",
    "BlizzardProfileClient",
    "CharacterProfilePayload",
    "GameDataAPIError",
    "character_profile_path",
    "flatten_account_roster",
    "guild_from_character_profile",
]
