"""Credibility leaderboard, score and history endpoints (read-only)."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import enforce_rate_limit, get_db_session
from app.schemas.user import CredibilityHistoryRead, LeaderboardEntryResponse, UserScoreResponse
from app.security.auth import require_roles
from app.security.roles import Role
from app.services import credibility_service


router = APIRouter(
    dependencies=[
        Depends(require_roles(Role.MEMBER, Role.ADMIN)),
        Depends(enforce_rate_limit),
    ]
)


@router.get("/leaderboard", response_model=list[LeaderboardEntryResponse])
def get_leaderboard(
    limit: int = Query(100, ge=1, le=100),
    db: Session = Depends(get_db_session),
) -> list[LeaderboardEntryResponse]:
    entries = credibility_service.get_leaderboard(db, limit=limit)
    return [LeaderboardEntryResponse.model_validate(e) for e in entries]


@router.get("/{user_id}", response_model=UserScoreResponse)
def get_user_score(user_id: UUID, db: Session = Depends(get_db_session)) -> UserScoreResponse:
    return UserScoreResponse.model_validate(credibility_service.get_user_score(db, user_id))


@router.get("/{user_id}/history", response_model=list[CredibilityHistoryRead])
def get_credibility_history(
    user_id: UUID,
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db_session),
) -> list[CredibilityHistoryRead]:
    rows = credibility_service.get_credibility_history(db, user_id, limit=limit)
    return [CredibilityHistoryRead.model_validate(r) for r in rows]
