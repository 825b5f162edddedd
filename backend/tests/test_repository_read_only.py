from __future__ import annotations

import pytest
from sqlalchemy import insert, select, update
from sqlalchemy.orm import Session

from app.models.signal import Signal
from app.models.user import User
from app.repositories.base import BaseRepository, RepositoryReadOnlyViolation


def test_repository_rejects_unflushed_session(db_session: Session):
    db_session.add(User(handle="pending", name="Pending", email="pending@example.com"))

    repo: BaseRepository[User] = BaseRepository(db_session)
    with pytest.raises(RepositoryReadOnlyViolation):
        repo._execute(select(User))


def test_repository_rejects_dml(db_session: Session):
    repo: BaseRepository[Signal] = BaseRepository(db_session)
    with pytest.raises(RepositoryReadOnlyViolation):
        repo._execute(insert(Signal))
    with pytest.raises(RepositoryReadOnlyViolation):
        repo._execute(update(Signal).values(consensus=0))


def test_repository_allows_locking_select(db_session: Session, make_user):
    user = make_user()
    repo: BaseRepository[User] = BaseRepository(db_session)
    row = repo._execute(select(User).where(User.id == user.id).with_for_update()).scalars().first()
    assert row is not None
    assert row.id == user.id
