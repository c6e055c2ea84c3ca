"""Translate Battle.net payloads into flat domain summaries."""

from __future__ import annotations

from collections.abc import Mapping
from logging import getLogger

from rostersync.domain.model import Faction, PlayableClass, PlayableRace, Realm
from rostersync.domain.reconciliation.contracts import (
    RemoteCharacterSummary,
    RemoteGuildSummary,
)

from .schema import (
    AccountProfilePayload,
    CharacterProfilePayload,
    FactionPayload,
    PlayableClassIndex,
    PlayableRaceIndex,
    RealmIndex,
    localized,
)

log = getLogger(__name__)

type AccountProfileInput = AccountProfilePayload | Mapping[str, object]
type CharacterProfileInput = CharacterProfilePayload | Mapping[str, object]


def flatten_account_roster(
    payload: AccountProfileInput,
    *,
    region: str,
) -> list[RemoteCharacterSummary]:
    """Collapse account -> wow accounts -> characters into one roster list."""

    profile = (
        payload
        if isinstance(payload, AccountProfilePayload)
        else AccountProfilePayload.model_validate(payload)
    )
    return [
        RemoteCharacterSummary(
            name=character.name,
            realm_slug=character.realm.slug,
            class_id=character.playable_class.id,
            race_id=character.playable_race.id,
            level=character.level,
            region=region,
        )
        for account in profile.wow_accounts
        for character in account.characters
    ]


def guild_from_character_profile(
    payload: CharacterProfileInput,
    *,
    region: str,
) -> RemoteGuildSummary | None:
    profile = (
        payload
        if isinstance(payload, CharacterProfilePayload)
        else CharacterProfilePayload.model_validate(payload)
    )
    guild = profile.guild
    if guild is None:
        return None
    # guild faction is usually omitted; the member's own faction is the same
    faction_payload = guild.faction or profile.faction
    return RemoteGuildSummary(
        name=guild.name,
        realm_slug=guild.realm.slug,
        region=region,
        faction=_faction(faction_payload),
    )


def _faction(payload: FactionPayload | None) -> Faction | None:
    if payload is None:
        return None
    return Faction.parse(payload.type)


def translate_playable_classes(index: PlayableClassIndex, *, locale: str) -> list[PlayableClass]:
    classes: list[PlayableClass] = []
    for entry in index.classes:
        name = localized(entry.name, locale)
        if name is None:
            log.warning("Skipping playable class %s without a name", entry.id)
            continue
        classes.append(PlayableClass(id=entry.id, name=name))
    return classes


def translate_playable_races(index: PlayableRaceIndex, *, locale: str) -> list[PlayableRace]:
    races: list[PlayableRace] = []
    for entry in index.races:
        name = localized(entry.name, locale)
        if name is None:
            log.warning("Skipping playable race %s without a name", entry.id)
            continue
        faction = (
            localized(entry.faction.name, locale) or entry.faction.type
            if entry.faction is not None
            else None
        )
        races.append(PlayableRace(id=entry.id, name=name, faction=faction))
    return races


def translate_realms(index: RealmIndex, *, locale: str, region: str) -> list[Realm]:
    return [
        Realm(
            id=entry.id,
            name=localized(entry.name, locale) or entry.slug,
            slug=entry.slug,
            region=region,
        )
        for entry in index.realms
    ]
