"""
Relational schema for the service directory.
Tables are declared once with SQLAlchemy Core so MySQL in production and SQLite in tests share one definition.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.engine import Engine


def utc_now() -> datetime:
    """Naive UTC timestamp; DATETIME columns carry no zone."""

    return datetime.now(tz=UTC).replace(tzinfo=None)


def as_datetime(value: Any) -> datetime | None:
    """Coerce a DATETIME value read through a text query; SQLite returns ISO strings."""

    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


metadata = MetaData()

administrative_divisions = Table(
    "administrative_divisions",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(100), nullable=False),
    Column("type", String(50), nullable=False),
    Column("level", Integer, nullable=False),
    Column("parent_id", Integer, ForeignKey("administrative_divisions.id"), nullable=True),
    Column("country_code", String(3), nullable=False),
    Column("latitude", Float, nullable=True),
    Column("longitude", Float, nullable=True),
    Column("created_at", DateTime, nullable=False, default=utc_now),
    Index("idx_admin_country", "country_code"),
    Index("idx_admin_parent", "parent_id"),
    Index("idx_admin_level", "level"),
    Index("idx_admin_type", "type"),
)

service_types = Table(
    "service_types",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(50), nullable=False, unique=True),
    Column("description", Text, nullable=True),
    Column("icon", String(100), nullable=True),
    Column("created_at", DateTime, nullable=False, default=utc_now),
)

services = Table(
    "services",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(100), nullable=False),
    Column("service_type_id", Integer, ForeignKey("service_types.id"), nullable=False),
    Column("street_address", String(255), nullable=False),
    Column("address_components", JSON, nullable=True),
    Column("country_code", String(3), nullable=False),
    Column("latitude", Float, nullable=False),
    Column("longitude", Float, nullable=False),
    Column("phone", String(20), nullable=True),
    Column("website", String(255), nullable=True),
    Column("rating", Numeric(2, 1, asdecimal=False), nullable=False, default=0.0),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("created_at", DateTime, nullable=False, default=utc_now),
    Column("updated_at", DateTime, nullable=False, default=utc_now, onupdate=utc_now),
    Index("idx_services_name", "name"),
    Index("idx_services_type", "service_type_id"),
    Index("idx_services_country", "country_code"),
    Index("idx_services_location", "latitude", "longitude"),
    Index("idx_services_active", "is_active"),
    Index("idx_services_address", "street_address"),
)

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("username", String(50), nullable=False, unique=True),
    Column("email", String(100), nullable=False, unique=True),
    Column("password_hash", String(255), nullable=False),
    Column("created_at", DateTime, nullable=False, default=utc_now),
    Column("updated_at", DateTime, nullable=False, default=utc_now, onupdate=utc_now),
)

user_favorites = Table(
    "user_favorites",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column("service_id", Integer, ForeignKey("services.id", ondelete="CASCADE"), nullable=False),
    Column("created_at", DateTime, nullable=False, default=utc_now),
    UniqueConstraint("user_id", "service_id", name="unique_user_service"),
    Index("idx_favorites_user", "user_id"),
    Index("idx_favorites_service", "service_id"),
)

CORE_TABLE_NAMES: tuple[str, ...] = (
    "administrative_divisions",
    "service_types",
    "services",
    "users",
    "user_favorites",
)


def create_schema(engine: Engine) -> None:
    """Create all tables that do not exist yet, parents before children."""

    metadata.create_all(engine)


def drop_schema(engine: Engine) -> None:
    metadata.drop_all(engine)
