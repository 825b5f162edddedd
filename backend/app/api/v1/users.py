"""User provisioning and profile endpoints.

Accounts are provisioned by the identity service (ADMIN token), which then
issues member tokens whose `sub` is the new user id.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import enforce_rate_limit, get_db_session
from app.models.challenge import ChallengeStatus
from app.schemas.challenge import ChallengeRead
from app.schemas.user import UserCreate, UserRead
from app.security.auth import require_roles
from app.security.roles import Role
from app.services import challenge_service, user_service


router = APIRouter(dependencies=[Depends(enforce_rate_limit)])

member = require_roles(Role.MEMBER, Role.ADMIN)


@router.post(
    "",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(Role.ADMIN))],
)
def register_user(data: UserCreate, db: Session = Depends(get_db_session)) -> UserRead:
    """Provision a user. Credibility starts at 50 and daily points at 100."""
    user = user_service.register_user(db, handle=data.handle, name=data.name, email=data.email)
    return UserRead.model_validate(user)


@router.get("/{user_id}", response_model=UserRead, dependencies=[Depends(member)])
def get_user(user_id: UUID, db: Session = Depends(get_db_session)) -> UserRead:
    return UserRead.model_validate(user_service.get_user(db, user_id))


@router.get("/{user_id}/challenges", response_model=list[ChallengeRead], dependencies=[Depends(member)])
def list_user_challenges(
    user_id: UUID,
    status_filter: Optional[ChallengeStatus] = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=100),
    db: Session = Depends(get_db_session),
) -> list[ChallengeRead]:
    rows = challenge_service.list_user_challenges(db, user_id, status=status_filter, limit=limit)
    return [ChallengeRead.model_validate(c) for c in rows]
