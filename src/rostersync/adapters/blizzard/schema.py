"""Pydantic models describing the Battle.net profile and game-data payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

type LocalizedString = str | dict[str, str | None]


def _none_to_list(value: object) -> object:
    return [] if value is None else value


def localized(value: LocalizedString | None, locale: str) -> str | None:
    """Pick ``locale`` from a localized name, which is a plain string when a locale was requested."""

    if value is None or isinstance(value, str):
        return value
    preferred = value.get(locale)
    if preferred:
        return preferred
    return next((text for text in value.values() if text), None)


class BlizzardBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class KeyedReference(BlizzardBaseModel):
    id: int
    name: LocalizedString | None = None


class FactionPayload(BlizzardBaseModel):
    type: str
    name: LocalizedString | None = None


class RealmReference(BlizzardBaseModel):
    slug: str
    id: int | None = None
    name: LocalizedString | None = None


class CharacterSummaryPayload(BlizzardBaseModel):
    name: str
    id: int | None = None
    realm: RealmReference
    playable_class: KeyedReference
    playable_race: KeyedReference
    level: int
    faction: FactionPayload | None = None


class WowAccountPayload(BlizzardBaseModel):
    id: int | None = None
    characters: list[CharacterSummaryPayload] = []

    _normalize_characters = field_validator("characters", mode="before")(_none_to_list)


class AccountProfilePayload(BlizzardBaseModel):
    id: int | None = None
    wow_accounts: list[WowAccountPayload] = []

    _normalize_accounts = field_validator("wow_accounts", mode="before")(_none_to_list)


class GuildReferencePayload(BlizzardBaseModel):
    name: str
    id: int | None = None
    realm: RealmReference
    faction: FactionPayload | None = None


class CharacterProfilePayload(BlizzardBaseModel):
    name: str
    id: int | None = None
    realm: RealmReference
    level: int | None = None
    faction: FactionPayload | None = None
    guild: GuildReferencePayload | None = None


class PlayableClassIndex(BlizzardBaseModel):
    classes: list[KeyedReference] = []

    _normalize_classes = field_validator("classes", mode="before")(_none_to_list)


class PlayableRaceReference(KeyedReference):
    faction: FactionPayload | None = None


class PlayableRaceIndex(BlizzardBaseModel):
    races: list[PlayableRaceReference] = []

    _normalize_races = field_validator("races", mode="before")(_none_to_list)


class RealmIndexEntry(BlizzardBaseModel):
    id: int
    slug: str
    name: LocalizedString | None = None


class RealmIndex(BlizzardBaseModel):
    realms: list[RealmIndexEntry] = []

    _normalize_realms = field_validator("realms", mode="before")(_none_to_list)


class TokenResponse(BlizzardBaseModel):
    access_token: str
    token_type: str | None = None
    expires_in: int | None = None
