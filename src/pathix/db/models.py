"""SQLAlchemy ORM models — single source of truth for the database schema.

Learn: Declarative ORM mapping with SQLAlchemy 2.0 style (Mapped[] + mapped_column).
Each class = one table. Alembic migrations mirror these definitions.

Key concepts:
- Generic Uuid / JSON column types so the same models run on PostgreSQL
  (asyncpg, JSONB) in production and SQLite (aiosqlite) in tests
- Map payloads and theme styling are free-form JSON documents
- Python-side timestamps (microsecond precision) so "newest first"
  ordering is stable even for rows created in the same second
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

# JSONB on PostgreSQL, plain JSON everywhere else
JSONDocument = JSON().with_variant(JSONB(), "postgresql")

ACCOUNT_STARTER = "Starter"
ACCOUNT_PRO = "Pro"
ACCOUNT_ENTERPRISE = "Enterprise"
ACCOUNT_TYPES = (ACCOUNT_STARTER, ACCOUNT_PRO, ACCOUNT_ENTERPRISE)


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_uuid() -> uuid.UUID:
    return uuid.uuid4()


class User(Base):
    """An account. Created by signup or by a first Google sign-in.

    Learn: password_hash is nullable because Google-only accounts never
    set a local password. The check constraint guarantees such a row
    still carries the Google subject it was created from.
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "password_hash IS NOT NULL OR google_id IS NOT NULL",
            name="ck_users_has_credential",
        ),
        CheckConstraint(
            "account_type IN ('Starter', 'Pro', 'Enterprise')",
            name="ck_users_account_type",
        ),
        CheckConstraint("scan_left >= 0", name="ck_users_scan_left_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=True
    )  # nullable for Google accounts
    name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    organization: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    google_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    account_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ACCOUNT_STARTER
    )
    scan_left: Mapped[int] = mapped_column(Integer, nullable=False, default=50)
    avatar: Mapped[Optional[str]] = mapped_column(Text, nullable=True)  # base64
    avatar_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    maps: Mapped[list["Map"]] = relationship(back_populates="owner")


class Map(Base):
    """A saved map: GPS path, landmarks and a theme reference in `data`.

    Learn: user_id is nullable — anonymous exports have no owner and are
    only reachable through their share link.
    """

    __tablename__ = "maps"
    __table_args__ = (
        Index("ix_maps_user_created", "user_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    data: Mapped[dict[str, Any]] = mapped_column(JSONDocument, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    owner: Mapped[Optional["User"]] = relationship(back_populates="maps")


class Theme(Base):
    """A shared visual style for rendering maps. Not owned by anyone."""

    __tablename__ = "themes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    assets: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONDocument, nullable=False, default=list
    )  # [{name, icon}], icon is an emoji or image URL
    background_image: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    fonts: Mapped[list[str]] = mapped_column(JSONDocument, nullable=False, default=list)
    road_style: Mapped[dict[str, Any]] = mapped_column(
        JSONDocument, nullable=False, default=dict
    )  # {color, width, lineCap, lineJoin}
    animations: Mapped[dict[str, Any]] = mapped_column(
        JSONDocument, nullable=False, default=dict
    )  # {glowingRoad, pulsingIcons}
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )
