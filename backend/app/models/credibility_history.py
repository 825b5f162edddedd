"""CredibilityHistory model.

Append-only audit trail of every credibility-affecting event. Each row holds
the score after the change, the signed change and a readable reason. Rows are
never updated or deleted; corrections are new rows.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Float, ForeignKey, Index, String, Uuid, event
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.base import Base, CreatedAtMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:  # pragma: no cover
    from app.models.user import User


class CredibilityHistoryImmutabilityError(RuntimeError):
    """Raised when an attempt is made to mutate or delete a CredibilityHistory row."""


class CredibilityHistory(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    __tablename__ = "credibility_history"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", name="fk_credibility_history_user_id", ondelete="RESTRICT"),
        nullable=False,
    )

    score: Mapped[float] = mapped_column(Float, nullable=False)
    change: Mapped[float] = mapped_column(Float, nullable=False)
    reason: Mapped[str] = mapped_column(String(255), nullable=False)

    user: Mapped["User"] = relationship("User", back_populates="credibility_history", viewonly=True)

    __table_args__ = (Index("ix_credibility_history_user_created_at", "user_id", "created_at"),)


@event.listens_for(CredibilityHistory, "before_update", propagate=True)
def _credibility_history_prevent_updates(mapper, connection, target) -> None:
    raise CredibilityHistoryImmutabilityError(
        "CredibilityHistory is append-only: record a new entry instead of updating."
    )


@event.listens_for(CredibilityHistory, "before_delete", propagate=True)
def _credibility_history_prevent_delete(mapper, connection, target) -> None:
    raise CredibilityHistoryImmutabilityError(
        "CredibilityHistory deletion is forbidden. The credibility audit trail must remain intact."
    )
