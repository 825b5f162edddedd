"""API dependencies.

- One Session per request; services open and commit their own unit of work on it.
- Every route requires an authenticated principal and passes the rate limiter.
"""

from __future__ import annotations

from collections.abc import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from app.core.db import SessionLocal
from app.security.auth import Principal, get_current_principal
from app.security.rate_limit import LIMITER


def get_db_session() -> Generator[Session, None, None]:
    """Provide a database session for request scope."""
    session: Session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def enforce_rate_limit(principal: Principal = Depends(get_current_principal)) -> None:
    """Enforce the per-token hourly request budget."""
    LIMITER.check(principal.token_fingerprint)
