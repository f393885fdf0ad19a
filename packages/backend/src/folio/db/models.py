"""SQLAlchemy ORM models: single source of truth for the database schema.

Learn: Declarative ORM mapping with SQLAlchemy 2.0 style (Mapped[] + mapped_column).
The auth core owns exactly one table, ``users``. The portfolio content
tables (publications, projects, ...) live with their CRUD handlers.

Key concepts:
- UUID primary keys via the generic ``Uuid`` type (native on PostgreSQL,
  CHAR(32) on SQLite, which the test suite runs against)
- email is the natural key: unique, stored lower-cased
- server_default for DB-level defaults (work even for raw SQL inserts)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_uuid() -> uuid.UUID:
    return uuid.uuid4()


ADMIN_ROLE = "admin"


class User(Base):
    """An account that can sign in to the admin area.

    Learn: In practice there is one row, the site owner, created by
    the bootstrap flow. ``role`` is a plain string so other roles can be
    added later; only "admin" is checked today.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(
        String(32), nullable=False, default=ADMIN_ROLE, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=utcnow
    )
