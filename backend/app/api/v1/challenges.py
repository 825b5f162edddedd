"""Challenge lifecycle endpoints (accept, resolve, read)."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import enforce_rate_limit, get_db_session
from app.schemas.challenge import ChallengeRead, ChallengeResolve
from app.security.auth import Principal, require_roles
from app.security.roles import Role
from app.services import challenge_service


router = APIRouter(dependencies=[Depends(enforce_rate_limit)])


@router.get("/{challenge_id}", response_model=ChallengeRead)
def get_challenge(
    challenge_id: UUID,
    _: Principal = Depends(require_roles(Role.MEMBER, Role.ADMIN)),
    db: Session = Depends(get_db_session),
) -> ChallengeRead:
    return ChallengeRead.model_validate(challenge_service.get_challenge(db, challenge_id))


@router.post("/{challenge_id}/accept", response_model=ChallengeRead)
def accept_challenge(
    challenge_id: UUID,
    principal: Principal = Depends(require_roles(Role.MEMBER, Role.ADMIN)),
    db: Session = Depends(get_db_session),
) -> ChallengeRead:
    challenge = challenge_service.accept_challenge(db, principal.user_id, challenge_id)
    return ChallengeRead.model_validate(challenge)


@router.post("/{challenge_id}/resolve", response_model=ChallengeRead)
def resolve_challenge(
    challenge_id: UUID,
    data: ChallengeResolve,
    principal: Principal = Depends(require_roles(Role.ADMIN)),
    db: Session = Depends(get_db_session),
) -> ChallengeRead:
    """Settle an accepted challenge. Outcome oracles are external; resolution is an admin action."""
    challenge = challenge_service.resolve_challenge(db, principal.user_id, challenge_id, data.winner_id)
    return ChallengeRead.model_validate(challenge)
