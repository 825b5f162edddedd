"""Challenge repository (read-only)."""

from __future__ import annotations

import uuid
from typing import Optional, Sequence

from sqlalchemy import Select, func, or_, select

from app.models.challenge import Challenge, ChallengeStatus
from app.repositories.base import BaseRepository


class ChallengeRepository(BaseRepository[Challenge]):
    def get(self, challenge_id: uuid.UUID, *, for_update: bool = False) -> Optional[Challenge]:
        stmt: Select = select(Challenge).where(Challenge.id == challenge_id)
        if for_update:
            stmt = stmt.with_for_update()
        return self._execute(stmt).scalars().first()

    def count_for_signal(self, signal_id: uuid.UUID) -> int:
        stmt: Select = select(func.count(Challenge.id)).where(Challenge.signal_id == signal_id)
        return int(self._execute(stmt).scalar_one())

    def list_for_user(
        self,
        user_id: uuid.UUID,
        *,
        status: Optional[ChallengeStatus] = None,
        limit: int = 50,
    ) -> Sequence[Challenge]:
        """Challenges the user issued or is (or became) the target of, newest first."""
        stmt: Select = select(Challenge).where(
            or_(Challenge.challenger_id == user_id, Challenge.target_id == user_id)
        )
        if status is not None:
            stmt = stmt.where(Challenge.status == status)
        stmt = stmt.order_by(Challenge.created_at.desc()).limit(limit)
        return self._execute(stmt).scalars().all()
