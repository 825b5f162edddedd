"""Time-decayed momentum scoring.

Momentum measures recent conviction activity on a signal:

    contribution = |value| * weight * exp(-age_hours / decay_hours)
    momentum     = min(sum(contributions) / scale, cap)

Only convictions inside the rolling window count. With a fixed conviction set
the score can only fall as the evaluation time advances.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from app.core.base import as_utc
from app.core.config import MomentumSettings
from scoring.core.errors import InvalidConvictionInput


SECONDS_PER_HOUR = 3600.0


@dataclass(frozen=True)
class TimedConviction:
    value: float
    weight: float
    created_at: datetime


class MomentumScorer:
    """Deterministic momentum calculator for one evaluation instant."""

    def __init__(self, settings: Optional[MomentumSettings] = None) -> None:
        self.settings = settings or MomentumSettings()

    def window_start(self, now: datetime) -> datetime:
        return as_utc(now) - timedelta(hours=self.settings.window_hours)

    def contribution(self, conviction: TimedConviction, now: datetime) -> float:
        if conviction.weight < 0:
            raise InvalidConvictionInput(f"Conviction weight {conviction.weight} is negative.")
        age_hours = (as_utc(now) - as_utc(conviction.created_at)).total_seconds() / SECONDS_PER_HOUR
        if age_hours > self.settings.window_hours:
            return 0.0
        # Clock skew can put created_at slightly ahead of `now`; treat as brand new.
        age_hours = max(0.0, age_hours)
        return abs(conviction.value) * conviction.weight * math.exp(-age_hours / self.settings.decay_hours)

    def score(self, convictions: Iterable[TimedConviction], now: datetime) -> float:
        total = sum(self.contribution(c, now) for c in convictions)
        return min(total / self.settings.scale, self.settings.cap)
