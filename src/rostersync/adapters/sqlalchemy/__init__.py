"""SQLAlchemy adapter package for rostersync."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyCharacterRepository,
    SqlAlchemyGuildRepository,
    SqlAlchemyReferenceDataRepository,
    SqlAlchemyUserRepository,
)
from .unit_of_work import (
    SqlAlchemyProfileUnitOfWork,
    SqlAlchemyReferenceDataUnitOfWork,
    StartupError,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyCharacterRepository",
    "SqlAlchemyGuildRepository",
    "SqlAlchemyProfileUnitOfWork",
    "SqlAlchemyReferenceDataRepository",
    "SqlAlchemyReferenceDataUnitOfWork",
    "SqlAlchemyUserRepository",
    "StartupError",
    "create_all_tables",
    "mapper_registry",
    "shutdown",
    "startup",
]
