"""Conviction ledger and consensus aggregation.

A conviction write and the consensus recomputation it triggers commit in one
transaction, with the signal row locked for its duration. Concurrent writers
on the same signal therefore serialize, and a reader never sees a conviction
without the consensus that includes it.
"""

from __future__ import annotations

import logging
import math
import uuid
from typing import Optional, Sequence

from sqlalchemy.orm import Session

from app.core.db import transaction
from app.core.errors import InvalidArgument, InvalidState, NotFound
from app.models.conviction import MAX_CONVICTION_VALUE, MIN_CONVICTION_VALUE, Conviction
from app.repositories.conviction_repo import ConvictionRepository
from app.repositories.signal_repo import SignalRepository
from app.repositories.user_repo import UserRepository
from scoring.core.consensus import ConsensusPoint, WeightedValue, consensus_history, conviction_weight, weighted_consensus


logger = logging.getLogger(__name__)


def _validate_value(value: float) -> float:
    if isinstance(value, bool):
        raise InvalidArgument("Conviction value must be a number")
    try:
        v = float(value)
    except (TypeError, ValueError) as e:
        raise InvalidArgument("Conviction value must be a number") from e
    if math.isnan(v) or not MIN_CONVICTION_VALUE <= v <= MAX_CONVICTION_VALUE:
        raise InvalidArgument("Conviction value must be between -100 and 100")
    return v


def submit_conviction(
    session: Session,
    user_id: uuid.UUID,
    signal_id: uuid.UUID,
    value: float,
) -> Conviction:
    """Record (or replace) the caller's conviction on a signal.

    At most one conviction exists per (user, signal): a repeat submission
    overwrites value and weight in place and leaves participant_count alone.
    The weight is the user's credibility at this moment and is not revisited
    later.
    """
    value = _validate_value(value)

    users = UserRepository(session)
    signals = SignalRepository(session)
    convictions = ConvictionRepository(session)

    with transaction(session):
        user = users.get(user_id)
        if user is None:
            raise NotFound("User not found")

        signal = signals.get(signal_id, for_update=True)
        if signal is None:
            raise NotFound("Signal not found")
        if signal.is_resolved:
            raise InvalidState("Cannot convict a resolved signal")

        weight = conviction_weight(user.credibility_score)
        conviction = convictions.find_by_user_and_signal(user_id, signal_id)

        if conviction is not None:
            conviction.value = value
            conviction.weight = weight
            created = False
        else:
            conviction = Conviction(user_id=user_id, signal_id=signal_id, value=value, weight=weight)
            session.add(conviction)
            signal.participant_count = signal.participant_count + 1
            created = True

        session.flush()
        consensus = recompute_consensus(session, signal_id)

    logger.info(
        f"Conviction {'recorded' if created else 'updated'} user={user_id} signal={signal_id} "
        f"value={value:.1f} weight={weight:.3f} consensus={consensus}"
    )
    return conviction


def recompute_consensus(session: Session, signal_id: uuid.UUID) -> Optional[float]:
    """Recompute a signal's consensus from all its convictions.

    Internal step of the conviction write; expects a flushed session inside the
    caller's transaction. Leaves the stored value alone when the signal has no
    convictions.
    """
    signal = SignalRepository(session).get(signal_id)
    if signal is None:
        raise NotFound("Signal not found")

    rows = ConvictionRepository(session).list_for_signal(signal_id)
    consensus = weighted_consensus(WeightedValue(value=c.value, weight=c.weight) for c in rows)
    if consensus is None:
        return None

    signal.consensus = consensus
    return consensus


def get_conviction(session: Session, user_id: uuid.UUID, signal_id: uuid.UUID) -> Optional[Conviction]:
    return ConvictionRepository(session).find_by_user_and_signal(user_id, signal_id)


def list_signal_convictions(
    session: Session, signal_id: uuid.UUID, *, limit: int = 10
) -> Sequence[Conviction]:
    if SignalRepository(session).get(signal_id) is None:
        raise NotFound("Signal not found")
    return ConvictionRepository(session).list_recent_for_signal(signal_id, limit=limit)


def get_consensus_history(session: Session, signal_id: uuid.UUID) -> list[ConsensusPoint]:
    """Running weighted consensus over a signal's convictions, oldest first.

    Each conviction is counted at its original time with its current value
    and weight.
    """
    if SignalRepository(session).get(signal_id) is None:
        raise NotFound("Signal not found")
    rows = ConvictionRepository(session).list_for_signal(signal_id)
    return consensus_history((c.created_at, WeightedValue(value=c.value, weight=c.weight)) for c in rows)
