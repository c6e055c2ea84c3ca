"""Profile reconciliation core.

Keeps stored characters and guilds eventually consistent with the roster a
user's remote account reports, keyed by ``(name, realm_slug, region)``.
"""

from __future__ import annotations

from .contracts import (
    CharacterRecord,
    ReconciliationResult,
    RemoteCharacterSummary,
    RemoteGuildSummary,
)
from .engine import ProfileReconciler
from .errors import (
    PersistenceFailedError,
    ReconciliationError,
    UnauthorizedError,
    UpstreamUnavailableError,
    UserNotFoundError,
)

__all__ = [
    "CharacterRecord",
    "PersistenceFailedError",
    "ProfileReconciler",
    "ReconciliationError",
    "ReconciliationResult",
    "RemoteCharacterSummary",
    "RemoteGuildSummary",
    "UnauthorizedError",
    "UpstreamUnavailableError",
    "UserNotFoundError",
]
