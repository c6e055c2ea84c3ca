"""Ports for fetching remote account and game data."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from rostersync.domain.model import PlayableClass, PlayableRace, Realm
    from rostersync.domain.reconciliation.contracts import (
        RemoteCharacterSummary,
        RemoteGuildSummary,
    )


class ProfileFetchError(RuntimeError):
    """Base class for failures reported by a remote profile fetcher."""


class UnauthorizedError(ProfileFetchError):
    """Raised when the remote service rejects the bearer token."""


class UpstreamUnavailableError(ProfileFetchError):
    """Raised on non-auth remote failures (status, transport or payload errors)."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@runtime_checkable
class ProfileFetcher(Protocol):
    """Authenticated access to a user's account roster and per-character detail."""

    def fetch_account_roster(self, token: str) -> list[RemoteCharacterSummary]: ...

    def fetch_character_detail(
        self, token: str, realm_slug: str, name: str
    ) -> RemoteGuildSummary | None: ...


@runtime_checkable
class ReferenceDataFetcher(Protocol):
    """Access to static game reference data."""

    def fetch_playable_classes(self) -> list[PlayableClass]: ...

    def fetch_playable_races(self) -> list[PlayableRace]: ...

    def fetch_realms(self) -> list[Realm]: ...


__all__ = [
    "ProfileFetchError",
    "ProfileFetcher",
    "ReferenceDataFetcher",
    "UnauthorizedError",
    "UpstreamUnavailableError",
]
