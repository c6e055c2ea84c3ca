"""Value objects exchanged between the remote profile client, the resolver and the store.

Remote summaries are produced fresh on every run and discarded afterwards;
they are never persisted as-is.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uuid import UUID

    from rostersync.domain.model import Faction


@dataclass(frozen=True, slots=True)
class RemoteGuildSummary:
    """Guild membership as reported by one character's detail fetch."""

    name: str
    realm_slug: str
    region: str
    faction: Faction | None = None


@dataclass(frozen=True, slots=True)
class RemoteCharacterSummary:
    """One roster entry, flattened out of the nested account payload."""

    name: str
    realm_slug: str
    class_id: int
    race_id: int
    level: int
    region: str


@dataclass(frozen=True, slots=True)
class CharacterRecord:
    """A roster entry paired with the guild id resolved from its own detail fetch."""

    summary: RemoteCharacterSummary
    guild_id: UUID | None = None


@dataclass(frozen=True, slots=True)
class ReconciliationResult:
    """Outcome of a successful reconciliation run."""

    user_id: UUID
    display_tag: str
    characters_written: int
