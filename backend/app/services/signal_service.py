"""Signal registry: posting, lookup, feed listing and resolution.

Consensus, momentum and participant count are never set here; they belong to
the conviction service and the momentum job.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Sequence

from sqlalchemy.orm import Session

from app.core.config import get_min_credibility_to_post
from app.core.db import transaction
from app.core.errors import Forbidden, InvalidArgument, InvalidState, NotFound
from app.models.signal import Signal
from app.repositories.challenge_repo import ChallengeRepository
from app.repositories.signal_repo import SORT_COLUMNS, SignalRepository
from app.repositories.user_repo import UserRepository


UTC = timezone.utc
logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 50


@dataclass(frozen=True, slots=True)
class SignalPage:
    signals: Sequence[Signal]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.limit else 0

    @property
    def has_next(self) -> bool:
        return self.page * self.limit < self.total

    @property
    def has_prev(self) -> bool:
        return self.page > 1


def create_signal(
    session: Session,
    user_id: uuid.UUID,
    *,
    content: str,
    category: str,
    topic: Optional[str] = None,
    timeframe: Optional[str] = None,
) -> Signal:
    """Post a new signal. Users below the credibility threshold may not post."""
    user = UserRepository(session).get(user_id)
    if user is None:
        raise NotFound("User not found")

    min_credibility = get_min_credibility_to_post()
    if user.credibility_score < min_credibility:
        raise Forbidden(f"Minimum credibility score of {min_credibility:g} required to create signals")

    with transaction(session):
        signal = Signal(
            user_id=user_id,
            content=content,
            topic=topic,
            category=category,
            timeframe=timeframe,
        )
        session.add(signal)

    logger.info(f"Signal {signal.id} created by {user_id} in {category}")
    return signal


def get_signal(session: Session, signal_id: uuid.UUID) -> Signal:
    signal = SignalRepository(session).get(signal_id)
    if signal is None:
        raise NotFound("Signal not found")
    return signal


def list_signals(
    session: Session,
    *,
    sort_by: str = "newest",
    category: Optional[str] = None,
    timeframe: Optional[str] = None,
    page: int = 1,
    limit: int = 20,
) -> SignalPage:
    if sort_by not in SORT_COLUMNS:
        raise InvalidArgument(f"sort_by must be one of: {', '.join(SORT_COLUMNS)}")
    if page < 1:
        raise InvalidArgument("page must be >= 1")
    limit = max(1, min(limit, MAX_PAGE_SIZE))

    rows, total = SignalRepository(session).list_signals(
        sort_by=sort_by,
        category=category,
        timeframe=timeframe,
        offset=(page - 1) * limit,
        limit=limit,
    )
    return SignalPage(signals=rows, page=page, limit=limit, total=total)


def resolve_signal(
    session: Session,
    user_id: uuid.UUID,
    signal_id: uuid.UUID,
    resolved_value: float,
) -> Signal:
    """Mark a signal's outcome. Only its creator may resolve it, exactly once."""
    with transaction(session):
        signal = SignalRepository(session).get(signal_id, for_update=True)
        if signal is None:
            raise NotFound("Signal not found")
        if signal.user_id != user_id:
            raise Forbidden("You can only resolve your own signals")
        if signal.is_resolved:
            raise InvalidState("Signal is already resolved")

        signal.resolved_at = datetime.now(tz=UTC)
        signal.resolved_value = float(resolved_value)

    logger.info(f"Signal {signal_id} resolved by {user_id} with value {resolved_value}")
    return signal


def _owned_unresolved(session: Session, user_id: uuid.UUID, signal_id: uuid.UUID, action: str) -> Signal:
    signal = SignalRepository(session).get(signal_id, for_update=True)
    if signal is None:
        raise NotFound("Signal not found")
    if signal.user_id != user_id:
        raise Forbidden(f"You can only {action} your own signals")
    if signal.is_resolved:
        raise InvalidState(f"Cannot {action} resolved signals")
    return signal


def update_signal(
    session: Session,
    user_id: uuid.UUID,
    signal_id: uuid.UUID,
    *,
    content: Optional[str] = None,
    topic: Optional[str] = None,
    category: Optional[str] = None,
    timeframe: Optional[str] = None,
) -> Signal:
    """Edit the statement of an unresolved signal. Fields left as None are kept."""
    changes = {"content": content, "topic": topic, "category": category, "timeframe": timeframe}

    with transaction(session):
        signal = _owned_unresolved(session, user_id, signal_id, "update")
        for name, value in changes.items():
            if value is not None:
                setattr(signal, name, value)

    logger.info(f"Signal {signal_id} updated by {user_id}")
    return signal


def delete_signal(session: Session, user_id: uuid.UUID, signal_id: uuid.UUID) -> None:
    """Delete an unresolved signal together with its convictions.

    Signals that carry challenges are kept, since their stakes are escrowed
    against them.
    """
    with transaction(session):
        signal = _owned_unresolved(session, user_id, signal_id, "delete")
        if ChallengeRepository(session).count_for_signal(signal_id):
            raise InvalidState("Cannot delete a signal with challenges")
        session.delete(signal)

    logger.info(f"Signal {signal_id} deleted by {user_id}")
