"""Challenge model.

A two-party stake contest over a signal. Lifecycle is strictly
PENDING -> ACCEPTED -> RESOLVED; there is no cancellation. Stakes are escrowed
by debiting daily points when a party joins; the winner collects both.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, Uuid, event, inspect
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql.sqltypes import Enum as SAEnum

from app.core.base import Base, CreatedAtMixin, UUIDPrimaryKeyMixin


MIN_STAKE = 1
MAX_STAKE = 100


class ChallengeTransitionError(RuntimeError):
    """Raised when a challenge row is moved along an illegal status edge or deleted."""


class ChallengeStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    RESOLVED = "RESOLVED"


_ALLOWED_TRANSITIONS = {
    (ChallengeStatus.PENDING, ChallengeStatus.ACCEPTED),
    (ChallengeStatus.ACCEPTED, ChallengeStatus.RESOLVED),
}


class Challenge(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    __tablename__ = "challenges"

    signal_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("signals.id", name="fk_challenges_signal_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    challenger_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", name="fk_challenges_challenger_id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    target_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", name="fk_challenges_target_id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )
    winner_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", name="fk_challenges_winner_id", ondelete="RESTRICT"),
        nullable=True,
    )

    stake_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[ChallengeStatus] = mapped_column(
        SAEnum(ChallengeStatus, name="challenge_status"),
        nullable=False,
        default=ChallengeStatus.PENDING,
    )

    accepted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint("stake_amount >= 1 AND stake_amount <= 100", name="ck_challenges_stake_range"),
        CheckConstraint("target_id IS NULL OR target_id <> challenger_id", name="ck_challenges_not_self"),
        Index("ix_challenges_status", "status"),
    )

    def participants(self) -> tuple[uuid.UUID, Optional[uuid.UUID]]:
        return self.challenger_id, self.target_id


@event.listens_for(Challenge, "before_update", propagate=True)
def _challenge_status_edges(mapper, connection, target) -> None:
    state = inspect(target)
    if not state.persistent:
        return

    hist = state.attrs["status"].history
    if not hist.has_changes():
        if target.status == ChallengeStatus.RESOLVED:
            raise ChallengeTransitionError(f"Challenge {target.id} is resolved and cannot be modified.")
        return

    old = hist.deleted[0] if hist.deleted else None
    new = hist.added[0] if hist.added else None
    if (old, new) not in _ALLOWED_TRANSITIONS:
        raise ChallengeTransitionError(f"Illegal challenge transition {old} -> {new} for {target.id}.")


@event.listens_for(Challenge, "before_delete", propagate=True)
def _challenge_prevent_delete(mapper, connection, target) -> None:
    raise ChallengeTransitionError("Challenge deletion is forbidden; settled stakes must stay auditable.")
