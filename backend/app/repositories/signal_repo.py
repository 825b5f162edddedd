"""Signal repository (read-only)."""

from __future__ import annotations

import uuid
from typing import Optional, Sequence

from sqlalchemy import Select, func, select

from app.models.signal import Signal
from app.repositories.base import BaseRepository


SORT_COLUMNS = {
    "newest": Signal.created_at,
    "momentum": Signal.momentum,
    "consensus": Signal.consensus,
    "participants": Signal.participant_count,
}


class SignalRepository(BaseRepository[Signal]):
    def get(self, signal_id: uuid.UUID, *, for_update: bool = False) -> Optional[Signal]:
        """Fetch a signal; `for_update` row-locks it until the transaction ends."""
        stmt: Select = select(Signal).where(Signal.id == signal_id)
        if for_update:
            stmt = stmt.with_for_update()
        return self._execute(stmt).scalars().first()

    def list_signals(
        self,
        *,
        sort_by: str = "newest",
        category: Optional[str] = None,
        timeframe: Optional[str] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[Sequence[Signal], int]:
        column = SORT_COLUMNS.get(sort_by)
        if column is None:
            raise ValueError(f"Unsupported sort_by: {sort_by!r}")

        stmt: Select = select(Signal)
        count_stmt: Select = select(func.count(Signal.id))
        if category:
            stmt = stmt.where(Signal.category == category)
            count_stmt = count_stmt.where(Signal.category == category)
        if timeframe:
            stmt = stmt.where(Signal.timeframe == timeframe)
            count_stmt = count_stmt.where(Signal.timeframe == timeframe)

        stmt = stmt.order_by(column.desc(), Signal.created_at.desc()).offset(offset).limit(limit)
        rows = self._execute(stmt).scalars().all()
        total = self._execute(count_stmt).scalar_one()
        return rows, int(total)
