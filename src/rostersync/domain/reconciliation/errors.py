"""Typed failures of a reconciliation run."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rostersync.domain.ports.fetching import (
    ProfileFetchError,
    UnauthorizedError,
    UpstreamUnavailableError,
)

if TYPE_CHECKING:
    from uuid import UUID


class ReconciliationError(RuntimeError):
    """Base class for failures that abort a reconciliation run."""


class UserNotFoundError(ReconciliationError):
    def __init__(self, user_id: UUID | int) -> None:
        super().__init__(f"User not found: {user_id}")
        self.user_id = user_id


class PersistenceFailedError(ReconciliationError):
    """Raised when a required batch write (or the user lookup) fails."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"Persistence failed: {detail}")
        self.detail = detail


__all__ = [
    "PersistenceFailedError",
    "ProfileFetchError",
    "ReconciliationError",
    "UnauthorizedError",
    "UpstreamUnavailableError",
    "UserNotFoundError",
]
