"""SQLAlchemy-backed units of work for profile reconciliation and reference data.

The adapter owns one process-wide engine. Call :func:`startup` once before
creating a unit of work; every unit of work opens its own short-lived session.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from rostersync.adapters.sqlalchemy.mappings import create_all_tables, start_mappers
from rostersync.adapters.sqlalchemy.repositories import (
    SqlAlchemyCharacterRepository,
    SqlAlchemyGuildRepository,
    SqlAlchemyReferenceDataRepository,
    SqlAlchemyUserRepository,
    store_errors,
)
from rostersync.config.storage import get_database_config
from rostersync.domain.ports.unit_of_work import (
    ProfileRepositories,
    ReferenceDataRepositories,
    RepositoryCollection,
)

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the SQLAlchemy adapter is used before (or configured twice without) startup."""


class _EngineState:
    def __init__(self) -> None:
        self.engine: Engine | None = None
        self.sessions: sessionmaker[Session] | None = None

    def bind(self, engine: Engine | None) -> None:
        self.engine = engine
        self.sessions = (
            sessionmaker(bind=engine, expire_on_commit=False) if engine is not None else None
        )

    def open_session(self) -> Session:
        if self.sessions is None:
            raise StartupError(
                "No database engine configured; call "
                "rostersync.adapters.sqlalchemy.unit_of_work.startup() first."
            )
        return self.sessions()


_STATE = _EngineState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Bind the adapter to an engine, mapping the model and creating missing tables."""

    if _STATE.engine is not None and not force:
        raise StartupError("Database engine already configured; pass force=True to replace it.")

    resolved_engine = engine or create_engine(database_uri or get_database_config().uri)
    start_mappers()
    create_all_tables(resolved_engine)
    log.debug("Bound unit of work to %s", resolved_engine.url)
    _STATE.bind(resolved_engine)


def configured_engine() -> Engine | None:
    return _STATE.engine


def is_started() -> bool:
    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the bound engine, if any, and forget it."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.bind(None)


class BaseSqlAlchemyUnitOfWork[TRepositories: RepositoryCollection](ABC):
    """Session-per-block unit of work; subclasses decide which repositories it exposes.

    Construction fails with :class:`StartupError` before :func:`startup`. Leaving
    the block on an exception rolls back; ``commit`` failures surface as
    ``RecordStoreError``.
    """

    def __init__(self) -> None:
        if not is_started():
            raise StartupError("Call startup() before creating a unit of work")
        self._session: Session | None = None
        self._repositories: TRepositories | None = None

    @abstractmethod
    def _build_repositories(self, session: Session) -> TRepositories: ...

    def __enter__(self) -> BaseSqlAlchemyUnitOfWork[TRepositories]:
        if self._session is not None:
            raise StartupError("Unit of work is already active")
        self._session = _STATE.open_session()
        self._repositories = self._build_repositories(self._session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        try:
            if exc_type is not None:
                self.rollback()
        finally:
            self.session.close()
            self._session = None
            self._repositories = None
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work used outside of its with-block")
        return self._session

    @property
    def repositories(self) -> TRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work used outside of its with-block")
        return self._repositories

    def commit(self) -> None:
        with store_errors("commit"):
            self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SqlAlchemyProfileUnitOfWork(BaseSqlAlchemyUnitOfWork[ProfileRepositories]):
    """Users, guilds and characters behind one session."""

    def _build_repositories(self, session: Session) -> ProfileRepositories:
        return ProfileRepositories(
            users=SqlAlchemyUserRepository(session),
            guilds=SqlAlchemyGuildRepository(session),
            characters=SqlAlchemyCharacterRepository(session),
        )


class SqlAlchemyReferenceDataUnitOfWork(BaseSqlAlchemyUnitOfWork[ReferenceDataRepositories]):
    def _build_repositories(self, session: Session) -> ReferenceDataRepositories:
        return ReferenceDataRepositories(
            reference_data=SqlAlchemyReferenceDataRepository(session),
        )


if TYPE_CHECKING:
    from rostersync.domain.ports.unit_of_work import ProfileUnitOfWork, ReferenceDataUnitOfWork

    _uow_profile_check: ProfileUnitOfWork = SqlAlchemyProfileUnitOfWork()
    _uow_reference_check: ReferenceDataUnitOfWork = SqlAlchemyReferenceDataUnitOfWork()
