"""Repository implementations backed by SQLAlchemy sessions.

Natural-key lookups compare lowercased names so a character reported as
``Thrall`` and stored as ``thrall`` is the same row; writes keep the casing
most recently reported by the remote service.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, cast

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError

from rostersync.adapters.sqlalchemy.mappings import (
    characters_table,
    guilds_table,
    users_table,
)
from rostersync.domain.model import Character, Guild, User
from rostersync.domain.ports.persistence import RecordStoreError
from rostersync.domain.reconciliation.identity import character_key, guild_key, normalize_key

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Sequence
    from uuid import UUID

    from sqlalchemy.orm import Session

    from rostersync.domain.model import NaturalKey, PlayableClass, PlayableRace, Realm
    from rostersync.domain.reconciliation.contracts import CharacterRecord, RemoteGuildSummary
    from rostersync.domain.reconciliation.identity import NaturallyKeyed

log = getLogger(__name__)


@contextmanager
def store_errors(operation: str) -> Iterator[None]:
    """Re-raise SQLAlchemy failures as the domain's :class:`RecordStoreError`."""

    try:
        yield
    except SQLAlchemyError as exc:
        log.error("Record store %s failed: %s", operation, exc)
        raise RecordStoreError(f"{operation} failed: {exc}") from exc


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _lowered_names(items: Iterable[NaturallyKeyed]) -> list[str]:
    return sorted({item.name.strip().lower() for item in items})


class SqlAlchemyUserRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, user: User) -> None:
        now = _utcnow()
        user.created_at = user.created_at or now
        user.updated_at = now
        self.session.add(user)

    def get(self, user_id: UUID) -> User | None:
        with store_errors("user lookup"):
            return self.session.get(User, user_id)

    def get_by_battlenet_id(self, battlenet_id: int) -> User | None:
        stmt = select(User).where(users_table.c.battlenet_id == battlenet_id)
        with store_errors("user lookup"):
            return self.session.execute(stmt).scalar_one_or_none()


class SqlAlchemyGuildRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def upsert_many(self, guilds: Sequence[RemoteGuildSummary]) -> list[tuple[NaturalKey, UUID]]:
        if not guilds:
            return []
        with store_errors("guild upsert"):
            existing = self._existing_by_key(guilds)
            persisted: list[tuple[NaturalKey, UUID]] = []
            now = _utcnow()
            for summary in guilds:
                key = guild_key(summary)
                guild = existing.get(key)
                if guild is None:
                    guild = Guild(
                        name=summary.name,
                        realm_slug=summary.realm_slug,
                        region=summary.region,
                        faction=summary.faction,
                        created_at=now,
                    )
                    self.session.add(guild)
                    existing[key] = guild
                else:
                    guild.name = summary.name
                    if summary.faction is not None:
                        guild.faction = summary.faction
                persisted.append((key, guild.id))
            self.session.flush()
        return persisted

    def _existing_by_key(self, guilds: Sequence[RemoteGuildSummary]) -> dict[NaturalKey, Guild]:
        stmt = (
            select(Guild)
            .where(func.lower(guilds_table.c.name).in_(_lowered_names(guilds)))
            .order_by(guilds_table.c.created_at, guilds_table.c.id)
        )
        found: dict[NaturalKey, Guild] = {}
        for guild in self.session.execute(stmt).scalars():
            found.setdefault(guild_key(guild), guild)
        return found


class SqlAlchemyCharacterRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def upsert_many(self, records: Sequence[CharacterRecord], *, owner_id: UUID) -> int:
        if not records:
            return 0
        with store_errors("character upsert"):
            existing = self._existing_by_key(records)
            written: set[NaturalKey] = set()
            now = _utcnow()
            for record in records:
                summary = record.summary
                key = character_key(summary)
                character = existing.get(key)
                if character is None:
                    character = Character(
                        name=summary.name,
                        realm_slug=summary.realm_slug,
                        region=summary.region,
                    )
                    self.session.add(character)
                    existing[key] = character
                elif character.user_id is not None and character.user_id != owner_id:
                    log.info(
                        "Transferring character %s from user %s to user %s",
                        key,
                        character.user_id,
                        owner_id,
                    )
                character.name = summary.name
                character.user_id = owner_id
                character.guild_id = record.guild_id
                character.level = summary.level
                character.class_id = summary.class_id
                character.race_id = summary.race_id
                character.last_updated = now
                written.add(key)
            self.session.flush()
        return len(written)

    def list_by_owner(self, owner_id: UUID) -> list[NaturalKey]:
        stmt = (
            select(
                characters_table.c.name,
                characters_table.c.realm_slug,
                characters_table.c.region,
            )
            .where(characters_table.c.user_id == owner_id)
            .order_by(characters_table.c.name)
        )
        with store_errors("character listing"):
            rows = self.session.execute(stmt).all()
        return [(name, realm_slug, region) for name, realm_slug, region in rows]

    def delete(self, owner_id: UUID, key: NaturalKey) -> bool:
        name, realm_slug, region = normalize_key(*key)
        stmt = (
            delete(characters_table)
            .where(characters_table.c.user_id == owner_id)
            .where(func.lower(characters_table.c.name) == name)
            .where(func.lower(characters_table.c.realm_slug) == realm_slug)
            .where(func.lower(characters_table.c.region) == region)
        )
        with store_errors("character delete"):
            result = self.session.execute(stmt)
        return bool(result.rowcount)

    def _existing_by_key(self, records: Sequence[CharacterRecord]) -> dict[NaturalKey, Character]:
        summaries = [record.summary for record in records]
        stmt = select(Character).where(
            func.lower(characters_table.c.name).in_(_lowered_names(summaries))
        )
        found: dict[NaturalKey, Character] = {}
        for character in self.session.execute(stmt).scalars():
            found.setdefault(character_key(character), character)
        return found


class SqlAlchemyReferenceDataRepository:
    """Upsert reference rows by their remote numeric id."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def upsert_classes(self, classes: Sequence[PlayableClass]) -> int:
        return self._merge_all(classes, "class upsert")

    def upsert_races(self, races: Sequence[PlayableRace]) -> int:
        return self._merge_all(races, "race upsert")

    def upsert_realms(self, realms: Sequence[Realm]) -> int:
        return self._merge_all(realms, "realm upsert")

    def _merge_all(self, items: Sequence[object], operation: str) -> int:
        with store_errors(operation):
            for item in items:
                self.session.merge(item)
            self.session.flush()
        return len(items)


if TYPE_CHECKING:
    from rostersync.domain.ports.persistence import (
        CharacterRepository,
        GuildRepository,
        ReferenceDataRepository,
        UserRepository,
    )

    _session_stub = cast("Session", object())
    _user_repo: UserRepository = SqlAlchemyUserRepository(_session_stub)
    _guild_repo: GuildRepository = SqlAlchemyGuildRepository(_session_stub)
    _character_repo: CharacterRepository = SqlAlchemyCharacterRepository(_session_stub)
    _reference_repo: ReferenceDataRepository = SqlAlchemyReferenceDataRepository(_session_stub)
