"""Challenge / stake settlement.

State machine: PENDING -> ACCEPTED -> RESOLVED, no cancellation.

- create: the challenger's stake is debited together with the insert.
- accept: the acceptor's matching stake is debited together with the
  transition (an open challenge binds its target here).
- resolve: the winner collects both stakes and +5 credibility, the loser gets
  -5, and each side receives a history row, all in one commit.

Total daily points across the two participants are conserved from creation to
resolution. Every precondition is checked before the first mutation.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional, Sequence

from sqlalchemy.orm import Session

from app.core.db import transaction
from app.core.errors import Forbidden, InvalidArgument, InvalidState, NotFound, PaymentRequired
from app.models.challenge import MAX_STAKE, MIN_STAKE, Challenge, ChallengeStatus
from app.repositories.challenge_repo import ChallengeRepository
from app.repositories.signal_repo import SignalRepository
from app.repositories.user_repo import UserRepository
from app.services.credibility_service import CHALLENGE_CREDIBILITY_CHANGE, adjust_credibility


UTC = timezone.utc
logger = logging.getLogger(__name__)


def _insufficient_points(available: int, required: int) -> PaymentRequired:
    return PaymentRequired(f"Insufficient points. Available: {available}, Required: {required}")


def create_challenge(
    session: Session,
    challenger_id: uuid.UUID,
    signal_id: uuid.UUID,
    target_id: Optional[uuid.UUID],
    stake_amount: int,
) -> Challenge:
    """Open a challenge on a signal, escrowing the challenger's stake."""
    if isinstance(stake_amount, bool) or not isinstance(stake_amount, int):
        raise InvalidArgument("Stake amount must be an integer")
    if not MIN_STAKE <= stake_amount <= MAX_STAKE:
        raise InvalidArgument(f"Stake amount must be between {MIN_STAKE} and {MAX_STAKE}")

    users = UserRepository(session)
    signals = SignalRepository(session)

    with transaction(session):
        challenger = users.get(challenger_id, for_update=True)
        if challenger is None:
            raise NotFound("Challenger not found")

        signal = signals.get(signal_id)
        if signal is None:
            raise NotFound("Signal not found")
        if signal.is_resolved:
            raise InvalidState("Cannot challenge a resolved signal")

        if stake_amount > challenger.daily_points:
            raise _insufficient_points(challenger.daily_points, stake_amount)

        if target_id is not None:
            if target_id == challenger_id:
                raise InvalidArgument("Cannot challenge yourself")
            if users.get(target_id) is None:
                raise NotFound("Target user not found")

        challenger.daily_points = challenger.daily_points - stake_amount
        challenge = Challenge(
            signal_id=signal_id,
            challenger_id=challenger_id,
            target_id=target_id,
            stake_amount=stake_amount,
            status=ChallengeStatus.PENDING,
        )
        session.add(challenge)

    logger.info(
        f"Challenge {challenge.id} created by {challenger_id} on signal {signal_id} "
        f"(target={target_id or 'open'}, stake={stake_amount})"
    )
    return challenge


def accept_challenge(session: Session, user_id: uuid.UUID, challenge_id: uuid.UUID) -> Challenge:
    """Match the stake of a pending challenge."""
    users = UserRepository(session)
    challenges = ChallengeRepository(session)

    with transaction(session):
        challenge = challenges.get(challenge_id, for_update=True)
        if challenge is None:
            raise NotFound("Challenge not found")
        if challenge.status != ChallengeStatus.PENDING:
            raise InvalidState("Challenge is not pending")
        if challenge.challenger_id == user_id:
            raise InvalidArgument("Cannot accept your own challenge")
        if challenge.target_id is not None and challenge.target_id != user_id:
            raise Forbidden("You are not the target of this challenge")

        acceptor = users.get(user_id, for_update=True)
        if acceptor is None:
            raise NotFound("User not found")
        if challenge.stake_amount > acceptor.daily_points:
            raise _insufficient_points(acceptor.daily_points, challenge.stake_amount)

        acceptor.daily_points = acceptor.daily_points - challenge.stake_amount
        challenge.status = ChallengeStatus.ACCEPTED
        challenge.target_id = user_id
        challenge.accepted_at = datetime.now(tz=UTC)

    logger.info(f"Challenge {challenge_id} accepted by {user_id}")
    return challenge


def resolve_challenge(
    session: Session,
    user_id: uuid.UUID,
    challenge_id: uuid.UUID,
    winner_id: uuid.UUID,
) -> Challenge:
    """Settle an accepted challenge in favour of `winner_id`.

    `user_id` is the resolving authority; it is recorded in the log only.
    """
    users = UserRepository(session)
    challenges = ChallengeRepository(session)

    with transaction(session):
        challenge = challenges.get(challenge_id, for_update=True)
        if challenge is None:
            raise NotFound("Challenge not found")
        if challenge.status != ChallengeStatus.ACCEPTED:
            raise InvalidState("Challenge is not accepted")

        challenger_id, target_id = challenge.participants()
        if winner_id not in (challenger_id, target_id):
            raise InvalidArgument("Winner must be one of the challenge participants")
        loser_id = target_id if winner_id == challenger_id else challenger_id

        locked = users.get_many_for_update([winner_id, loser_id])
        winner = locked.get(winner_id)
        loser = locked.get(loser_id)
        if winner is None or loser is None:
            raise NotFound("Challenge participant not found")

        winner.daily_points = winner.daily_points + challenge.stake_amount * 2
        adjust_credibility(
            session, winner.id, CHALLENGE_CREDIBILITY_CHANGE, f"Won challenge #{challenge.id}", user=winner
        )
        adjust_credibility(
            session, loser.id, -CHALLENGE_CREDIBILITY_CHANGE, f"Lost challenge #{challenge.id}", user=loser
        )

        challenge.status = ChallengeStatus.RESOLVED
        challenge.winner_id = winner_id
        challenge.resolved_at = datetime.now(tz=UTC)

    logger.info(f"Challenge {challenge_id} resolved by {user_id}: winner={winner_id} pot={challenge.stake_amount * 2}")
    return challenge


def get_challenge(session: Session, challenge_id: uuid.UUID) -> Challenge:
    challenge = ChallengeRepository(session).get(challenge_id)
    if challenge is None:
        raise NotFound("Challenge not found")
    return challenge


def list_user_challenges(
    session: Session,
    user_id: uuid.UUID,
    *,
    status: Optional[ChallengeStatus] = None,
    limit: int = 50,
) -> Sequence[Challenge]:
    if UserRepository(session).get(user_id) is None:
        raise NotFound("User not found")
    return ChallengeRepository(session).list_for_user(user_id, status=status, limit=limit)
