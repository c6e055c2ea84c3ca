"""Ports for persisting users, guilds, characters and reference data."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from rostersync.domain.model import NaturalKey, PlayableClass, PlayableRace, Realm, User
    from rostersync.domain.reconciliation.contracts import CharacterRecord, RemoteGuildSummary


class RecordStoreError(RuntimeError):
    """Raised when the record store fails to read or write."""


@runtime_checkable
class UserRepository(Protocol):
    def add(self, user: User) -> None: ...

    def get(self, user_id: UUID) -> User | None: ...

    def get_by_battlenet_id(self, battlenet_id: int) -> User | None: ...


@runtime_checkable
class GuildRepository(Protocol):
    def upsert_many(self, guilds: Sequence[RemoteGuildSummary]) -> list[tuple[NaturalKey, UUID]]:
        """Insert or update guilds by natural key and return the persisted ids."""
        ...


@runtime_checkable
class CharacterRepository(Protocol):
    def upsert_many(self, records: Sequence[CharacterRecord], *, owner_id: UUID) -> int:
        """Insert or update characters by natural key, assigning ``owner_id``."""
        ...

    def list_by_owner(self, owner_id: UUID) -> list[NaturalKey]: ...

    def delete(self, owner_id: UUID, key: NaturalKey) -> bool:
        """Delete the single character matching owner and key; return whether a row went."""
        ...


@runtime_checkable
class ReferenceDataRepository(Protocol):
    def upsert_classes(self, classes: Sequence[PlayableClass]) -> int: ...

    def upsert_races(self, races: Sequence[PlayableRace]) -> int: ...

    def upsert_realms(self, realms: Sequence[Realm]) -> int: ...
