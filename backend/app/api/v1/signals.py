"""Signal, conviction and challenge-creation endpoints.

Consensus and momentum are exposed read-only on signal responses; the only
way to move consensus is to submit a conviction.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.api.deps import enforce_rate_limit, get_db_session
from app.schemas.challenge import ChallengeCreate, ChallengeRead
from app.schemas.signal import (
    ConsensusPointRead,
    ConvictionCreate,
    ConvictionRead,
    Pagination,
    SignalCreate,
    SignalListResponse,
    SignalRead,
    SignalResolve,
    SignalUpdate,
    SortBy,
)
from app.security.auth import Principal, require_roles
from app.security.roles import Role
from app.services import challenge_service, conviction_service, signal_service


router = APIRouter(dependencies=[Depends(enforce_rate_limit)])

member = require_roles(Role.MEMBER, Role.ADMIN)


@router.post("", response_model=SignalRead, status_code=status.HTTP_201_CREATED)
def create_signal(
    data: SignalCreate,
    principal: Principal = Depends(member),
    db: Session = Depends(get_db_session),
) -> SignalRead:
    signal = signal_service.create_signal(
        db,
        principal.user_id,
        content=data.content,
        category=data.category,
        topic=data.topic,
        timeframe=data.timeframe,
    )
    return SignalRead.model_validate(signal)


@router.get("", response_model=SignalListResponse, dependencies=[Depends(member)])
def list_signals(
    sort_by: SortBy = Query("newest"),
    category: Optional[str] = Query(None, max_length=50),
    timeframe: Optional[str] = Query(None, max_length=50),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=50),
    db: Session = Depends(get_db_session),
) -> SignalListResponse:
    result = signal_service.list_signals(
        db, sort_by=sort_by, category=category, timeframe=timeframe, page=page, limit=limit
    )
    return SignalListResponse(
        signals=[SignalRead.model_validate(s) for s in result.signals],
        pagination=Pagination(
            page=result.page,
            limit=result.limit,
            total=result.total,
            total_pages=result.total_pages,
            has_next=result.has_next,
            has_prev=result.has_prev,
        ),
    )


@router.get("/{signal_id}", response_model=SignalRead, dependencies=[Depends(member)])
def get_signal(signal_id: UUID, db: Session = Depends(get_db_session)) -> SignalRead:
    return SignalRead.model_validate(signal_service.get_signal(db, signal_id))


@router.patch("/{signal_id}", response_model=SignalRead)
def update_signal(
    signal_id: UUID,
    data: SignalUpdate,
    principal: Principal = Depends(member),
    db: Session = Depends(get_db_session),
) -> SignalRead:
    """Edit an unresolved signal you created; omitted fields are kept."""
    signal = signal_service.update_signal(
        db,
        principal.user_id,
        signal_id,
        content=data.content,
        topic=data.topic,
        category=data.category,
        timeframe=data.timeframe,
    )
    return SignalRead.model_validate(signal)


@router.delete("/{signal_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_signal(
    signal_id: UUID,
    principal: Principal = Depends(member),
    db: Session = Depends(get_db_session),
) -> Response:
    signal_service.delete_signal(db, principal.user_id, signal_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{signal_id}/consensus-history", response_model=list[ConsensusPointRead], dependencies=[Depends(member)])
def get_consensus_history(signal_id: UUID, db: Session = Depends(get_db_session)) -> list[ConsensusPointRead]:
    return [ConsensusPointRead.model_validate(p) for p in conviction_service.get_consensus_history(db, signal_id)]


@router.post("/{signal_id}/resolve", response_model=SignalRead)
def resolve_signal(
    signal_id: UUID,
    data: SignalResolve,
    principal: Principal = Depends(member),
    db: Session = Depends(get_db_session),
) -> SignalRead:
    signal = signal_service.resolve_signal(db, principal.user_id, signal_id, data.resolved_value)
    return SignalRead.model_validate(signal)


@router.post("/{signal_id}/convictions", response_model=ConvictionRead)
def submit_conviction(
    signal_id: UUID,
    data: ConvictionCreate,
    principal: Principal = Depends(member),
    db: Session = Depends(get_db_session),
) -> ConvictionRead:
    """Create or replace the caller's conviction; consensus updates in the same commit."""
    conviction = conviction_service.submit_conviction(db, principal.user_id, signal_id, data.value)
    return ConvictionRead.model_validate(conviction)


@router.get("/{signal_id}/convictions/me", response_model=Optional[ConvictionRead])
def get_my_conviction(
    signal_id: UUID,
    principal: Principal = Depends(member),
    db: Session = Depends(get_db_session),
) -> Optional[ConvictionRead]:
    """The caller's conviction on this signal, or null if they have none."""
    conviction = conviction_service.get_conviction(db, principal.user_id, signal_id)
    return ConvictionRead.model_validate(conviction) if conviction is not None else None


@router.get("/{signal_id}/convictions", response_model=list[ConvictionRead], dependencies=[Depends(member)])
def list_signal_convictions(
    signal_id: UUID,
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db_session),
) -> list[ConvictionRead]:
    rows = conviction_service.list_signal_convictions(db, signal_id, limit=limit)
    return [ConvictionRead.model_validate(c) for c in rows]


@router.post("/{signal_id}/challenges", response_model=ChallengeRead, status_code=status.HTTP_201_CREATED)
def create_challenge(
    signal_id: UUID,
    data: ChallengeCreate,
    principal: Principal = Depends(member),
    db: Session = Depends(get_db_session),
) -> ChallengeRead:
    challenge = challenge_service.create_challenge(
        db, principal.user_id, signal_id, data.target_id, data.stake_amount
    )
    return ChallengeRead.model_validate(challenge)
