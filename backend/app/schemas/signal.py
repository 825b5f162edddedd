"""Schemas for signals and convictions."""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


Category = Literal["Technology", "Finance", "Politics", "Sports", "Entertainment", "Science"]
Timeframe = Literal["1h", "24h", "7d", "1m", "3m", "6m", "1y", "2y", "5y"]
SortBy = Literal["newest", "momentum", "consensus", "participants"]


class SignalCreate(BaseModel):
    content: str = Field(..., min_length=10, max_length=500, description="Prediction statement")
    topic: Optional[str] = Field(None, max_length=100)
    category: Category
    timeframe: Optional[Timeframe] = None


class SignalUpdate(BaseModel):
    content: Optional[str] = Field(None, min_length=10, max_length=500)
    topic: Optional[str] = Field(None, max_length=100)
    category: Optional[Category] = None
    timeframe: Optional[Timeframe] = None


class SignalResolve(BaseModel):
    resolved_value: float = Field(..., ge=-100, le=100, description="Outcome on the conviction scale")


class SignalRead(BaseModel):
    id: UUID
    user_id: UUID
    content: str
    topic: Optional[str] = None
    category: str
    timeframe: Optional[str] = None
    consensus: float
    momentum: float
    participant_count: int
    resolved_at: Optional[datetime] = None
    resolved_value: Optional[float] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class SignalListResponse(BaseModel):
    signals: list[SignalRead]
    pagination: Pagination


class ConvictionCreate(BaseModel):
    value: float = Field(..., strict=True, description="Direction and confidence, -100..100", examples=[75])


class ConvictionRead(BaseModel):
    id: UUID
    user_id: UUID
    signal_id: UUID
    value: float
    weight: float
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ConsensusPointRead(BaseModel):
    timestamp: datetime
    consensus: float
    participant_count: int

    model_config = ConfigDict(from_attributes=True)
