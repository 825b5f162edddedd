"""SQLAlchemy declarative base and shared mixins.

- UUID primary keys (application-generated) so ids can be handed to clients
  without exposing row counts.
- Timezone-aware UTC timestamps everywhere; ages used by the momentum scorer
  are computed against these.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import DateTime, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


UTC = timezone.utc


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


class UUIDPrimaryKeyMixin:
    """UUID primary key mixin (application-generated)."""

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )


class CreatedAtMixin:
    """Created-at timestamp mixin (UTC timestamptz).

    The Python-side default keeps sub-second precision on every backend; the
    server default covers rows inserted outside the ORM.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(tz=UTC),
        server_default=func.now(),
    )


class UpdatedAtMixin:
    """Updated-at timestamp mixin (UTC timestamptz). Only for mutable tables."""

    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        onupdate=lambda: datetime.now(tz=UTC),
    )


def as_utc(value: datetime) -> datetime:
    """Normalize a datetime read back from the store to aware UTC.

    Backends without timestamptz (SQLite) return naive values that were written
    as UTC.
    """
    if value.tzinfo is None or value.utcoffset() is None:
        return value.replace(tzinfo=UTC)
    if value.utcoffset() != timedelta(0):
        return value.astimezone(UTC)
    return value
