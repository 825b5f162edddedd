"""Schemas for users and credibility."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class UserCreate(BaseModel):
    handle: str = Field(..., min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_]+$")
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., max_length=255)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip()
        local, _, domain = v.partition("@")
        if not local or "." not in domain:
            raise ValueError("email must be a valid address")
        return v


class UserRead(BaseModel):
    id: UUID
    handle: str
    name: str
    credibility_score: float
    daily_points: int
    accuracy: float
    streak: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserScoreResponse(BaseModel):
    id: str
    handle: str
    name: str
    credibility_score: float
    accuracy: float
    streak: int
    rank: int = Field(ge=1)

    model_config = ConfigDict(from_attributes=True)


class LeaderboardEntryResponse(BaseModel):
    rank: int = Field(ge=1)
    id: str
    handle: str
    name: str
    credibility_score: float
    accuracy: float

    model_config = ConfigDict(from_attributes=True)


class CredibilityHistoryRead(BaseModel):
    score: float
    change: float
    reason: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
