"""Credibility score store.

Adjustments are staged on the caller's session and committed by the caller's
unit of work, so a score change and its history row always land together.
Scores are not clamped.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional, Sequence

from sqlalchemy.orm import Session

from app.core.errors import NotFound
from app.models.credibility_history import CredibilityHistory
from app.models.user import User
from app.repositories.user_repo import LeaderboardEntryDTO, UserRepository, UserScoreDTO


logger = logging.getLogger(__name__)

ACCOUNT_CREATION_CREDIT = 50.0
CHALLENGE_CREDIBILITY_CHANGE = 5.0


def adjust_credibility(
    session: Session,
    user_id: uuid.UUID,
    delta: float,
    reason: str,
    *,
    user: Optional[User] = None,
) -> CredibilityHistory:
    """Apply `delta` to a user's score and append the matching history row.

    Pass `user` when the caller already holds the (locked) row; otherwise it is
    loaded for update, which requires a clean session.
    """
    if user is None:
        user = UserRepository(session).get(user_id, for_update=True)
        if user is None:
            raise NotFound("User not found")

    user.credibility_score = user.credibility_score + delta
    entry = CredibilityHistory(
        user_id=user.id,
        score=user.credibility_score,
        change=delta,
        reason=reason,
    )
    session.add(entry)
    logger.info(f"Credibility {delta:+.2f} for user {user.id} -> {user.credibility_score:.2f} ({reason})")
    return entry


def get_user_score(session: Session, user_id: uuid.UUID) -> UserScoreDTO:
    score = UserRepository(session).get_score(user_id)
    if score is None:
        raise NotFound("User not found")
    return score


def get_leaderboard(session: Session, *, limit: int = 100) -> Sequence[LeaderboardEntryDTO]:
    return UserRepository(session).list_leaderboard(limit=limit)


def get_credibility_history(
    session: Session, user_id: uuid.UUID, *, limit: int = 50
) -> Sequence[CredibilityHistory]:
    repo = UserRepository(session)
    if repo.get(user_id) is None:
        raise NotFound("User not found")
    return repo.list_credibility_history(user_id, limit=limit)
