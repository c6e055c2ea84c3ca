"""Domain port definitions for adapters."""

from __future__ import annotations

from .fetching import (
    ProfileFetcher,
    ProfileFetchError,
    ReferenceDataFetcher,
    UnauthorizedError,
    UpstreamUnavailableError,
)
from .persistence import (
    CharacterRepository,
    GuildRepository,
    RecordStoreError,
    ReferenceDataRepository,
    UserRepository,
)
from .unit_of_work import (
    ProfileRepositories,
    ProfileUnitOfWork,
    ReferenceDataRepositories,
    ReferenceDataUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "CharacterRepository",
    "GuildRepository",
    "ProfileFetchError",
    "ProfileFetcher",
    "ProfileRepositories",
    "ProfileUnitOfWork",
    "RecordStoreError",
    "ReferenceDataFetcher",
    "ReferenceDataRepositories",
    "ReferenceDataRepository",
    "ReferenceDataUnitOfWork",
    "RepositoryCollection",
    "UnitOfWork",
    "UserRepository",
]
