"""SQLAlchemy mapping metadata for the rostersync domain model."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers

from rostersync.domain.model import (
    Character,
    Faction,
    Guild,
    PlayableClass,
    PlayableRace,
    Realm,
    User,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Account tables --------------------------------------------------------------

users_table = Table(
    "users",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("battlenet_id", BigInteger, nullable=False, unique=True),
    Column("battletag", String, nullable=False),
    Column("access_token", String, nullable=True),
    Column("refresh_token", String, nullable=True),
    Column("token_expires_at", UTCDateTime, nullable=True),
    Column("created_at", UTCDateTime, nullable=True),
    Column("updated_at", UTCDateTime, nullable=True),
)

guilds_table = Table(
    "guilds",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False),
    Column("realm_slug", String, nullable=False),
    Column("region", String(8), nullable=False, default="us"),
    Column("faction", Enum(Faction, native_enum=False), nullable=True),
    Column("created_at", UTCDateTime, nullable=True),
    UniqueConstraint("name", "realm_slug", "region"),
)

characters_table = Table(
    "characters",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "user_id",
        UUIDColumnType,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    ),
    Column(
        "guild_id",
        UUIDColumnType,
        ForeignKey("guilds.id", ondelete="SET NULL"),
        nullable=True,
    ),
    Column("name", String, nullable=False),
    Column("realm_slug", String, nullable=False),
    Column("region", String(8), nullable=False, default="us"),
    Column("level", Integer, nullable=True),
    Column("class_id", Integer, nullable=True),
    Column("race_id", Integer, nullable=True),
    Column("guild_rank", Integer, nullable=True),
    Column("last_updated", UTCDateTime, nullable=True),
    UniqueConstraint("name", "realm_slug", "region"),
    Index(None, "user_id"),
)

# Reference tables ------------------------------------------------------------

wow_classes_table = Table(
    "wow_classes",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=False),
    Column("name", String, nullable=False),
)

wow_races_table = Table(
    "wow_races",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=False),
    Column("name", String, nullable=False),
    Column("faction", String, nullable=True),
)

wow_realms_table = Table(
    "wow_realms",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=False),
    Column("name", String, nullable=False),
    Column("slug", String, nullable=False),
    Column("region", String(8), nullable=False),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(User, users_table)
    mapper_registry.map_imperatively(Guild, guilds_table)
    mapper_registry.map_imperatively(Character, characters_table)
    mapper_registry.map_imperatively(PlayableClass, wow_classes_table)
    mapper_registry.map_imperatively(PlayableRace, wow_races_table)
    mapper_registry.map_imperatively(Realm, wow_realms_table)

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
