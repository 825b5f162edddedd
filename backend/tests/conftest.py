from __future__ import annotations

import os
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Generator, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool


ROOT = Path(__file__).resolve().parents[2]

# Ensure `backend/` is importable so `app` and `scoring` resolve as top-level packages.
BACKEND_DIR = ROOT / "backend"
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from app.core.base import Base  # noqa: E402
from app.core.db import enable_sqlite_foreign_keys, make_sessionmaker  # noqa: E402
from app.core.env import load_env_if_present  # noqa: E402
import app.models  # noqa: F401,E402
from app.models.signal import Signal  # noqa: E402
from app.models.user import User  # noqa: E402


def _db_url() -> str | None:
    load_env_if_present()
    return os.environ.get("DATABASE_URL")


def _alembic_upgrade(db_url: str) -> None:
    from alembic import command
    from alembic.config import Config

    cfg = Config(str(BACKEND_DIR / "alembic.ini"))
    cfg.set_main_option("script_location", str(BACKEND_DIR / "alembic"))
    cfg.set_main_option("sqlalchemy.url", db_url)
    command.upgrade(cfg, "head")


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    """PostgreSQL (migrated with Alembic) when DATABASE_URL is set, else in-memory SQLite."""
    url = _db_url()
    if url:
        _alembic_upgrade(url)
        eng = create_engine(url, future=True)
    else:
        eng = create_engine(
            "sqlite+pysqlite://",
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        enable_sqlite_foreign_keys(eng)
        Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session_factory(engine: Engine):
    return make_sessionmaker(engine)


@pytest.fixture()
def db_session(engine: Engine, session_factory) -> Generator[Session, None, None]:
    """DB session per test; every table is emptied afterwards.

    Services commit their own unit of work, so isolation is by cleanup rather
    than by an outer rollback. Core deletes bypass the ORM append-only guards.
    """
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        with engine.begin() as conn:
            for table in reversed(Base.metadata.sorted_tables):
                conn.execute(table.delete())


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    counter = {"n": 0}

    def _make(
        *,
        credibility: float = 50.0,
        points: int = 100,
        handle: Optional[str] = None,
    ) -> User:
        counter["n"] += 1
        n = counter["n"]
        user = User(
            handle=handle or f"user{n}",
            name=f"User {n}",
            email=f"user{n}@example.com",
            credibility_score=credibility,
            daily_points=points,
            accuracy=0.0,
            streak=0,
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make


@pytest.fixture()
def make_signal(db_session: Session) -> Callable[..., Signal]:
    def _make(owner: User, *, content: str = "BTC closes above 100k by year end", category: str = "Finance") -> Signal:
        signal = Signal(user_id=owner.id, content=content, category=category, timeframe="1y")
        db_session.add(signal)
        db_session.commit()
        return signal

    return _make


def make_jwt(sub: str, role: str, secret: str, *, exp: int | None = None) -> str:
    """HS256 JWT generator for API tests (no external dependency)."""
    import base64, hashlib, hmac, json  # noqa: E401

    def b64url(raw: bytes) -> str:
        return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")

    header = {"alg": "HS256", "typ": "JWT"}
    payload = {"sub": sub, "role": role}
    if exp is not None:
        payload["exp"] = exp

    header_b64 = b64url(json.dumps(header, separators=(",", ":")).encode("utf-8"))
    payload_b64 = b64url(json.dumps(payload, separators=(",", ":")).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("ascii")
    sig = hmac.new(secret.encode("utf-8"), signing_input, hashlib.sha256).digest()
    return f"{header_b64}.{payload_b64}.{b64url(sig)}"
