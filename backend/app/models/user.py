"""User model.

A user's credibility score drives the weight of every conviction they submit
and moves with challenge outcomes. Daily points are the stake currency for
challenges. Users are never deleted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Float, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.base import Base, CreatedAtMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:  # pragma: no cover
    from app.models.credibility_history import CredibilityHistory


INITIAL_DAILY_POINTS = 100


class User(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    __tablename__ = "users"

    handle: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    # Unbounded by design: adjustments are applied as-is, never clamped.
    credibility_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    daily_points: Mapped[int] = mapped_column(Integer, nullable=False, default=INITIAL_DAILY_POINTS)
    accuracy: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    credibility_history: Mapped[list["CredibilityHistory"]] = relationship(
        "CredibilityHistory",
        back_populates="user",
        order_by="CredibilityHistory.created_at",
        viewonly=True,
    )

    __table_args__ = (Index("ix_users_credibility_score", "credibility_score"),)
