"""Signal model.

A signal is a user-posted prediction. Its consensus, momentum and participant
count are derived values owned by the aggregation components; nothing else
writes them. Once resolved, a signal is frozen: its statement and resolution
cannot be rewritten, and it no longer accepts convictions or challenges.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, DateTime, Float, ForeignKey, Index, Integer, String, Uuid, event, inspect
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates
from sqlalchemy.sql.sqltypes import Text

from app.core.base import Base, CreatedAtMixin, UpdatedAtMixin, UUIDPrimaryKeyMixin, as_utc

if TYPE_CHECKING:  # pragma: no cover
    from app.models.conviction import Conviction


DEFAULT_CONSENSUS = 50.0


class ResolvedSignalMutationError(RuntimeError):
    """Raised when a resolved signal's statement or resolution is modified or it is deleted."""


class Signal(UUIDPrimaryKeyMixin, CreatedAtMixin, UpdatedAtMixin, Base):
    __tablename__ = "signals"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", name="fk_signals_user_id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    content: Mapped[str] = mapped_column(Text, nullable=False)
    topic: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    timeframe: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    consensus: Mapped[float] = mapped_column(Float, nullable=False, default=DEFAULT_CONSENSUS)
    momentum: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    participant_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    resolved_value: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    convictions: Mapped[list["Conviction"]] = relationship(
        "Conviction",
        back_populates="signal",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint("consensus >= 0 AND consensus <= 100", name="ck_signals_consensus_range"),
        CheckConstraint("momentum >= 0", name="ck_signals_momentum_non_negative"),
        CheckConstraint("participant_count >= 0", name="ck_signals_participant_count_non_negative"),
        Index("ix_signals_category_created_at", "category", "created_at"),
        Index("ix_signals_momentum", "momentum"),
    )

    @property
    def is_resolved(self) -> bool:
        return self.resolved_at is not None

    @validates("resolved_at")
    def _validate_utc(self, key: str, value: Optional[datetime]) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None or value.utcoffset() is None:
            raise ValueError(f"{key} must be timezone-aware (UTC).")
        return as_utc(value)


_FROZEN_AFTER_RESOLUTION = ("content", "topic", "category", "timeframe", "resolved_at", "resolved_value", "user_id")


@event.listens_for(Signal, "before_update", propagate=True)
def _signal_frozen_after_resolution(mapper, connection, target) -> None:
    state = inspect(target)
    if not state.persistent:
        return

    resolved_hist = state.attrs["resolved_at"].history
    was_resolved = bool(resolved_hist.deleted and resolved_hist.deleted[0] is not None) or (
        not resolved_hist.has_changes() and target.resolved_at is not None
    )
    if not was_resolved:
        return

    for attr_name in _FROZEN_AFTER_RESOLUTION:
        if state.attrs[attr_name].history.has_changes():
            raise ResolvedSignalMutationError(
                f"Signal {target.id} is resolved: field '{attr_name}' cannot be updated."
            )


@event.listens_for(Signal, "before_delete", propagate=True)
def _signal_resolved_delete_forbidden(mapper, connection, target) -> None:
    if target.resolved_at is not None:
        raise ResolvedSignalMutationError(f"Signal {target.id} is resolved and cannot be deleted.")
