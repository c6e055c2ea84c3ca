"""Domain model for rostersync."""

from __future__ import annotations

from .base import Entity, new_id
from .enums import Faction
from .profile import Character, Guild, NaturalKey, User
from .reference import PlayableClass, PlayableRace, Realm

__all__ = [
    "Character",
    "Entity",
    "Faction",
    "Guild",
    "NaturalKey",
    "PlayableClass",
    "PlayableRace",
    "Realm",
    "User",
    "new_id",
]
