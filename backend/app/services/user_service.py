"""User registration and lookup."""

from __future__ import annotations

import logging
import uuid

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.db import transaction
from app.core.errors import Conflict, NotFound
from app.models.user import INITIAL_DAILY_POINTS, User
from app.repositories.user_repo import UserRepository
from app.services.credibility_service import ACCOUNT_CREATION_CREDIT, adjust_credibility


logger = logging.getLogger(__name__)


def register_user(session: Session, *, handle: str, name: str, email: str) -> User:
    """Create a user seeded through the credibility ledger.

    The account starts at zero and receives the creation credit as its first
    history entry, so the ledger always sums to the current score.
    """
    handle = handle.strip()
    email = email.strip().lower()

    repo = UserRepository(session)
    if repo.find_by_handle_or_email(handle, email) is not None:
        raise Conflict("User with this email or handle already exists")

    try:
        with transaction(session):
            user = User(
                handle=handle,
                name=name.strip(),
                email=email,
                credibility_score=0.0,
                daily_points=INITIAL_DAILY_POINTS,
                accuracy=0.0,
                streak=0,
            )
            session.add(user)
            session.flush()
            adjust_credibility(session, user.id, ACCOUNT_CREATION_CREDIT, "Account creation", user=user)
    except IntegrityError as e:
        # Lost a race with a concurrent registration of the same handle/email.
        raise Conflict("User with this email or handle already exists") from e

    logger.info(f"Registered user {user.id} (@{user.handle})")
    return user


def get_user(session: Session, user_id: uuid.UUID) -> User:
    user = UserRepository(session).get(user_id)
    if user is None:
        raise NotFound("User not found")
    return user
