"""Profile reconciliation orchestrator.

One run brings the store in line with a user's remote roster:

1) load the user and their bearer token
2) fetch the account roster
3) fetch per-character detail to learn guild membership (best effort)
4) upsert the deduplicated guilds as one batch
5) link every character to the guild from its own detail fetch
6) upsert the characters as one batch, owned by the user
7) delete owned characters that left the roster (best effort)

Steps 4 and 6 are the only commit points. No session is held open while
the remote service is being called.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass, field
from functools import partial
from logging import getLogger
from threading import Lock
from typing import TYPE_CHECKING

from rostersync.domain.ports.fetching import UnauthorizedError
from rostersync.domain.ports.persistence import RecordStoreError

from .contracts import CharacterRecord, ReconciliationResult
from .errors import PersistenceFailedError, UserNotFoundError
from .identity import (
    ConflictingGuildIdError,
    build_guild_id_map,
    character_key,
    dedupe_characters,
    dedupe_guilds,
    guild_key,
    orphaned_keys,
    resolve_guild_id,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Sequence
    from uuid import UUID

    from rostersync.domain.model import NaturalKey, User
    from rostersync.domain.ports.fetching import ProfileFetcher
    from rostersync.domain.ports.unit_of_work import ProfileUnitOfWork

    from .contracts import RemoteCharacterSummary, RemoteGuildSummary

log = getLogger(__name__)


class _UserLocks:
    """One lock per user id so runs for the same user never interleave.

    An entry lives only while some run holds or waits on it.
    """

    def __init__(self) -> None:
        self._guard = Lock()
        self._entries: dict[UUID, _LockEntry] = {}

    @contextmanager
    def hold(self, user_id: UUID) -> Iterator[None]:
        with self._guard:
            entry = self._entries.get(user_id)
            if entry is None:
                entry = self._entries[user_id] = _LockEntry()
            entry.holders += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._guard:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._entries[user_id]

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)


@dataclass(slots=True)
class _LockEntry:
    lock: Lock = field(default_factory=Lock)
    holders: int = 0


# Shared by every reconciler in the process.
USER_LOCKS = _UserLocks()


@dataclass(slots=True)
class ProfileReconciler:
    """Reconcile stored characters and guilds with a user's remote roster."""

    fetcher: ProfileFetcher
    unit_of_work_factory: Callable[[], ProfileUnitOfWork]
    detail_concurrency: int = 1
    user_locks: _UserLocks = field(default=USER_LOCKS, repr=False)

    def __post_init__(self) -> None:
        if self.detail_concurrency < 1:
            raise ValueError("detail_concurrency must be at least 1")

    def reconcile(self, user_id: UUID) -> ReconciliationResult:
        """Run one reconciliation for ``user_id`` and return the written character count."""

        with self.user_locks.hold(user_id):
            return self._reconcile(user_id)

    def _reconcile(self, user_id: UUID) -> ReconciliationResult:
        user = self._load_user(user_id)
        token = user.access_token
        if not token:
            raise UnauthorizedError(f"No access token stored for user {user.id}")

        log.info("Starting profile reconciliation for user %s (%s)", user.id, user.display_tag)

        roster = dedupe_characters(self.fetcher.fetch_account_roster(token))
        guild_by_character = self._fetch_guilds(token, roster)

        guild_ids = self._write_guilds(dedupe_guilds(guild_by_character.values()))
        records = [
            CharacterRecord(
                summary=character,
                guild_id=resolve_guild_id(guild_by_character[character_key(character)], guild_ids),
            )
            for character in roster
        ]
        written = self._write_characters(records, owner_id=user.id)
        removed = self._remove_orphans(user.id, roster)

        log.info(
            "Finished profile reconciliation for user %s: characters=%s, guilds=%s, removed=%s",
            user.id,
            written,
            len(guild_ids),
            removed,
        )
        return ReconciliationResult(
            user_id=user.id,
            display_tag=user.display_tag,
            characters_written=written,
        )

    def _load_user(self, user_id: UUID) -> User:
        try:
            with self.unit_of_work_factory() as uow:
                user = uow.repositories.users.get(user_id)
        except RecordStoreError as exc:
            raise PersistenceFailedError(f"user lookup failed: {exc}") from exc
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def _fetch_guilds(
        self,
        token: str,
        roster: Sequence[RemoteCharacterSummary],
    ) -> dict[NaturalKey, RemoteGuildSummary | None]:
        fetch = partial(self._fetch_detail, token)
        if self.detail_concurrency == 1 or len(roster) <= 1:
            details = [fetch(character) for character in roster]
        else:
            workers = min(self.detail_concurrency, len(roster))
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="detail") as pool:
                details = list(pool.map(fetch, roster))
        return {
            character_key(character): detail
            for character, detail in zip(roster, details, strict=True)
        }

    def _fetch_detail(
        self, token: str, character: RemoteCharacterSummary
    ) -> RemoteGuildSummary | None:
        try:
            return self.fetcher.fetch_character_detail(token, character.realm_slug, character.name)
        except Exception as exc:  # noqa: BLE001
            log.warning(
                "Detail fetch failed for %s-%s, treating as guildless: %s",
                character.name,
                character.realm_slug,
                exc,
            )
            return None

    def _write_guilds(self, guilds: Sequence[RemoteGuildSummary]) -> dict[NaturalKey, UUID]:
        if not guilds:
            return {}
        try:
            with self.unit_of_work_factory() as uow:
                upserted = uow.repositories.guilds.upsert_many(guilds)
                uow.commit()
            guild_ids = build_guild_id_map(upserted)
        except RecordStoreError as exc:
            raise PersistenceFailedError(f"guild upsert failed: {exc}") from exc
        except ConflictingGuildIdError as exc:
            raise PersistenceFailedError(str(exc)) from exc

        missing = {guild_key(guild) for guild in guilds}.difference(guild_ids)
        if missing:
            raise PersistenceFailedError(f"guild upsert returned no id for {sorted(missing)}")
        return guild_ids

    def _write_characters(self, records: Sequence[CharacterRecord], *, owner_id: UUID) -> int:
        if not records:
            return 0
        try:
            with self.unit_of_work_factory() as uow:
                written = uow.repositories.characters.upsert_many(records, owner_id=owner_id)
                uow.commit()
        except RecordStoreError as exc:
            raise PersistenceFailedError(f"character upsert failed: {exc}") from exc
        return written

    def _remove_orphans(self, user_id: UUID, roster: Sequence[RemoteCharacterSummary]) -> int:
        removed = 0
        try:
            with self.unit_of_work_factory() as uow:
                orphans = orphaned_keys(uow.repositories.characters.list_by_owner(user_id), roster)
                for key in orphans:
                    try:
                        deleted = uow.repositories.characters.delete(user_id, key)
                        uow.commit()
                    except RecordStoreError as exc:
                        uow.rollback()
                        log.warning("Could not delete character %s for user %s: %s", key, user_id, exc)
                        continue
                    if deleted:
                        removed += 1
        except RecordStoreError as exc:
            log.warning("Skipping orphan cleanup for user %s: %s", user_id, exc)
        return removed
