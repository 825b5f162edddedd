"""Conviction repository (read-only)."""

from __future__ import annotations

import uuid
from typing import Optional, Sequence

from sqlalchemy import Select, select

from app.models.conviction import Conviction
from app.repositories.base import BaseRepository


class ConvictionRepository(BaseRepository[Conviction]):
    def find_by_user_and_signal(self, user_id: uuid.UUID, signal_id: uuid.UUID) -> Optional[Conviction]:
        stmt: Select = (
            select(Conviction)
            .where(Conviction.user_id == user_id)
            .where(Conviction.signal_id == signal_id)
            .limit(1)
        )
        return self._execute(stmt).scalars().first()

    def list_for_signal(self, signal_id: uuid.UUID) -> Sequence[Conviction]:
        """All convictions on a signal, oldest first."""
        stmt: Select = (
            select(Conviction)
            .where(Conviction.signal_id == signal_id)
            .order_by(Conviction.created_at.asc(), Conviction.id.asc())
        )
        return self._execute(stmt).scalars().all()

    def list_recent_for_signal(self, signal_id: uuid.UUID, *, limit: int = 10) -> Sequence[Conviction]:
        stmt: Select = (
            select(Conviction)
            .where(Conviction.signal_id == signal_id)
            .order_by(Conviction.created_at.desc())
            .limit(limit)
        )
        return self._execute(stmt).scalars().all()
