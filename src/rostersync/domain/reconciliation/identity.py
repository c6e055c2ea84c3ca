"""Natural-key identity for characters and guilds.

Pure functions only. Names are lowercased for comparison; callers keep the
remote service's casing for anything they store.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping
    from uuid import UUID

    from rostersync.domain.model import NaturalKey

    from .contracts import RemoteCharacterSummary, RemoteGuildSummary


class NaturallyKeyed(Protocol):
    @property
    def name(self) -> str: ...

    @property
    def realm_slug(self) -> str: ...

    @property
    def region(self) -> str: ...


class ConflictingGuildIdError(ValueError):
    """Raised when one guild natural key maps to two different persisted ids."""

    def __init__(self, key: NaturalKey, first: UUID, second: UUID) -> None:
        self.key = key
        super().__init__(f"Guild {key} resolved to both {first} and {second}")


def normalize_key(name: str, realm_slug: str, region: str) -> NaturalKey:
    return (name.strip().lower(), realm_slug.strip().lower(), region.strip().lower())


def character_key(character: NaturallyKeyed) -> NaturalKey:
    return normalize_key(character.name, character.realm_slug, character.region)


def guild_key(guild: NaturallyKeyed) -> NaturalKey:
    return normalize_key(guild.name, guild.realm_slug, guild.region)


def _first_seen[T](items: Iterable[T | None], key: Callable[[T], NaturalKey]) -> list[T]:
    seen: set[NaturalKey] = set()
    unique: list[T] = []
    for item in items:
        if item is None:
            continue
        item_key = key(item)
        if item_key in seen:
            continue
        seen.add(item_key)
        unique.append(item)
    return unique


def dedupe_guilds(guilds: Iterable[RemoteGuildSummary | None]) -> list[RemoteGuildSummary]:
    """Collapse guilds sharing a natural key; the first occurrence wins. ``None`` is skipped."""

    return _first_seen(guilds, guild_key)


def dedupe_characters(
    characters: Iterable[RemoteCharacterSummary],
) -> list[RemoteCharacterSummary]:
    return _first_seen(characters, character_key)


def build_guild_id_map(upserted: Iterable[tuple[NaturalKey, UUID]]) -> dict[NaturalKey, UUID]:
    """Map each guild natural key to its persisted id.

    The result does not depend on the order of ``upserted``; a key reported
    with two different ids raises :class:`ConflictingGuildIdError`.
    """

    guild_ids: dict[NaturalKey, UUID] = {}
    for raw_key, guild_id in upserted:
        key = normalize_key(*raw_key)
        existing = guild_ids.get(key)
        if existing is not None and existing != guild_id:
            raise ConflictingGuildIdError(key, existing, guild_id)
        guild_ids[key] = guild_id
    return guild_ids


def resolve_guild_id(
    guild: RemoteGuildSummary | None,
    guild_ids: Mapping[NaturalKey, UUID],
) -> UUID | None:
    if guild is None:
        return None
    return guild_ids.get(guild_key(guild))


def orphaned_keys(
    owned: Iterable[NaturalKey],
    roster: Iterable[RemoteCharacterSummary],
) -> list[NaturalKey]:
    """Return the owned keys (as stored) that no longer appear in ``roster``."""

    current = {character_key(character) for character in roster}
    return [key for key in owned if normalize_key(*key) not in current]
