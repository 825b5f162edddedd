"""API v1 root router."""

from __future__ import annotations

from fastapi import APIRouter

from app.api.v1.challenges import router as challenges_router
from app.api.v1.credibility import router as credibility_router
from app.api.v1.signals import router as signals_router
from app.api.v1.users import router as users_router


router = APIRouter()
router.include_router(users_router, prefix="/users", tags=["users"])
router.include_router(credibility_router, prefix="/credibility", tags=["credibility"])
router.include_router(signals_router, prefix="/signals", tags=["signals"])
router.include_router(challenges_router, prefix="/challenges", tags=["challenges"])
