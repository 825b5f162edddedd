"""User and credibility read models."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Optional, Sequence

from sqlalchemy import Select, func, or_, select

from app.models.credibility_history import CredibilityHistory
from app.models.user import User
from app.repositories.base import BaseRepository


@dataclass(frozen=True, slots=True)
class UserScoreDTO:
    id: str
    handle: str
    name: str
    credibility_score: float
    accuracy: float
    streak: int
    rank: int


@dataclass(frozen=True, slots=True)
class LeaderboardEntryDTO:
    rank: int
    id: str
    handle: str
    name: str
    credibility_score: float
    accuracy: float


class UserRepository(BaseRepository[User]):
    def get(self, user_id: uuid.UUID, *, for_update: bool = False) -> Optional[User]:
        stmt: Select = select(User).where(User.id == user_id)
        if for_update:
            stmt = stmt.with_for_update()
        return self._execute(stmt).scalars().first()

    def get_many_for_update(self, user_ids: Sequence[uuid.UUID]) -> dict[uuid.UUID, User]:
        """Lock several users in id order so concurrent settlements cannot deadlock."""
        stmt: Select = select(User).where(User.id.in_(list(user_ids))).order_by(User.id).with_for_update()
        rows = self._execute(stmt).scalars().all()
        return {u.id: u for u in rows}

    def find_by_handle_or_email(self, handle: str, email: str) -> Optional[User]:
        stmt: Select = select(User).where(or_(User.handle == handle, User.email == email)).limit(1)
        return self._execute(stmt).scalars().first()

    def get_score(self, user_id: uuid.UUID) -> Optional[UserScoreDTO]:
        user = self.get(user_id)
        if user is None:
            return None
        stmt: Select = select(func.count(User.id)).where(User.credibility_score > user.credibility_score)
        higher = self._execute(stmt).scalar_one()
        return UserScoreDTO(
            id=str(user.id),
            handle=user.handle,
            name=user.name,
            credibility_score=user.credibility_score,
            accuracy=user.accuracy,
            streak=user.streak,
            rank=int(higher) + 1,
        )

    def list_leaderboard(self, *, limit: int = 100) -> Sequence[LeaderboardEntryDTO]:
        stmt: Select = (
            select(User)
            .order_by(User.credibility_score.desc(), User.created_at.asc())
            .limit(limit)
        )
        rows = self._execute(stmt).scalars().all()
        return [
            LeaderboardEntryDTO(
                rank=i + 1,
                id=str(u.id),
                handle=u.handle,
                name=u.name,
                credibility_score=u.credibility_score,
                accuracy=u.accuracy,
            )
            for i, u in enumerate(rows)
        ]

    def list_credibility_history(self, user_id: uuid.UUID, *, limit: int = 50) -> Sequence[CredibilityHistory]:
        """Newest first."""
        stmt: Select = (
            select(CredibilityHistory)
            .where(CredibilityHistory.user_id == user_id)
            .order_by(CredibilityHistory.created_at.desc())
            .limit(limit)
        )
        return self._execute(stmt).scalars().all()
