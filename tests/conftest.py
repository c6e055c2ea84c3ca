from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from rostersync.adapters.sqlalchemy import create_all_tables, start_mappers
from rostersync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyProfileUnitOfWork,
    SqlAlchemyReferenceDataUnitOfWork,
    shutdown,
    startup,
)

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    start_mappers()
    create_all_tables(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, future=True, expire_on_commit=False)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyProfileUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyProfileUnitOfWork:
        return SqlAlchemyProfileUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()


@pytest.fixture
def threaded_unit_of_work() -> Iterator[Callable[[], SqlAlchemyProfileUnitOfWork]]:
    """Like ``sqlite_unit_of_work`` but usable from several threads at once."""

    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    startup(engine=engine, force=True)
    try:
        yield SqlAlchemyProfileUnitOfWork
    finally:
        shutdown()


@pytest.fixture
def sqlite_reference_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyReferenceDataUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyReferenceDataUnitOfWork:
        return SqlAlchemyReferenceDataUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()
