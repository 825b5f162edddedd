"""Schemas for challenges."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.models.challenge import ChallengeStatus


class ChallengeCreate(BaseModel):
    target_id: Optional[UUID] = Field(None, description="Leave empty for an open challenge")
    stake_amount: int = Field(..., description="Points staked, 1..100")

class ChallengeResolve(BaseModel):
    winner_id: UUID

class ChallengeRead(BaseModel):
    id: UUID
    signal_id: UUID
    challenger_id: UUID
    target_id: Optional[UUID] = None
    winner_id: Optional[UUID] = None
    stake_amount: int
    status: ChallengeStatus
    created_at: datetime
    accepted_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
