"""Weighted consensus arithmetic.

Conviction values live on a bipolar scale [-100, 100] (sign is direction,
magnitude is confidence). Consensus is published on a unipolar [0, 100] scale
where 50 means an even split.

Pure functions only; persistence lives in the conviction service.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from scoring.core.errors import InvalidConvictionInput


MIN_WEIGHT = 0.1
VALUE_BOUND = 100.0


@dataclass(frozen=True)
class WeightedValue:
    value: float
    weight: float


def conviction_weight(credibility_score: float) -> float:
    """Weight of a new conviction: credibility / 100, floored at 0.1.

    The floor keeps near-zero (or negative) credibility users from casting
    zero-weight convictions.
    """
    return max(MIN_WEIGHT, credibility_score / 100.0)


def normalize_consensus(raw: float) -> float:
    """Map a bipolar mean in [-100, 100] onto [0, 100].

    Clamped so float rounding in the weighted mean (e.g. -100.00000000000001)
    cannot leave the published range.
    """
    return min(100.0, max(0.0, (raw + VALUE_BOUND) / 2.0))


def weighted_consensus(convictions: Iterable[WeightedValue]) -> Optional[float]:
    """Full recomputation of consensus from every conviction on a signal.

    Returns None when there are no convictions; the caller then leaves the
    stored consensus untouched. A zero total weight yields a raw mean of 0.
    """
    total_weighted = 0.0
    total_weight = 0.0
    count = 0
    for c in convictions:
        if not -VALUE_BOUND <= c.value <= VALUE_BOUND:
            raise InvalidConvictionInput(f"Conviction value {c.value} outside [-100, 100].")
        total_weighted += c.value * c.weight
        total_weight += c.weight
        count += 1

    if count == 0:
        return None

    raw = total_weighted / total_weight if total_weight > 0 else 0.0
    return normalize_consensus(raw)


@dataclass(frozen=True)
class ConsensusPoint:
    timestamp: datetime
    consensus: float
    participant_count: int


def consensus_history(convictions: Iterable[tuple[datetime, WeightedValue]]) -> list[ConsensusPoint]:
    """Running consensus after each conviction, in the order given (oldest first).

    Each point is what the consensus would have read once that conviction was
    in; the last point equals `weighted_consensus` over the same set.
    """
    points: list[ConsensusPoint] = []
    total_weighted = 0.0
    total_weight = 0.0
    for created_at, c in convictions:
        if not -VALUE_BOUND <= c.value <= VALUE_BOUND:
            raise InvalidConvictionInput(f"Conviction value {c.value} outside [-100, 100].")
        total_weighted += c.value * c.weight
        total_weight += c.weight
        raw = total_weighted / total_weight if total_weight > 0 else 0.0
        points.append(
            ConsensusPoint(timestamp=created_at, consensus=normalize_consensus(raw), participant_count=len(points) + 1)
        )
    return points
