"""Conviction model.

One weighted, directional opinion from a user on a signal. The weight is a
snapshot of the user's credibility at the time of the write and is not
recomputed when credibility later changes.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Float, ForeignKey, Index, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.base import Base, CreatedAtMixin, UpdatedAtMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:  # pragma: no cover
    from app.models.signal import Signal


MIN_CONVICTION_VALUE = -100.0
MAX_CONVICTION_VALUE = 100.0


class Conviction(UUIDPrimaryKeyMixin, CreatedAtMixin, UpdatedAtMixin, Base):
    __tablename__ = "convictions"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", name="fk_convictions_user_id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    signal_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("signals.id", name="fk_convictions_signal_id", ondelete="CASCADE"),
        nullable=False,
    )

    value: Mapped[float] = mapped_column(Float, nullable=False)
    weight: Mapped[float] = mapped_column(Float, nullable=False)

    signal: Mapped["Signal"] = relationship("Signal", back_populates="convictions")

    __table_args__ = (
        UniqueConstraint("user_id", "signal_id", name="uq_convictions_user_signal"),
        CheckConstraint("value >= -100 AND value <= 100", name="ck_convictions_value_range"),
        CheckConstraint("weight > 0", name="ck_convictions_weight_positive"),
        Index("ix_convictions_signal_created_at", "signal_id", "created_at"),
    )
