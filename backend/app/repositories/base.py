"""Read-only repository base.

Repositories only query. Services own every mutation and the transaction that
commits it. A query is refused while the session holds unflushed changes, so
a read never silently autoflushes half-staged state; services flush before
re-reading what they just wrote.
"""

from __future__ import annotations

from typing import Any, Generic, Optional, TypeVar

from sqlalchemy.engine import Result
from sqlalchemy.orm import Session
from sqlalchemy.sql import Executable
from sqlalchemy.sql.selectable import Select


class RepositoryReadOnlyViolation(RuntimeError):
    """A repository was asked to write, or to read over unflushed changes."""


T = TypeVar("T")


def _pending(session: Session) -> Optional[str]:
    if not (session.new or session.dirty or session.deleted):
        return None
    return f"new={len(session.new)}, dirty={len(session.dirty)}, deleted={len(session.deleted)}"


class BaseRepository(Generic[T]):
    """Guarded SELECT execution over a Session.

    Row locks (`with_for_update()`) are reads and are allowed.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def _guard(self, stmt: Optional[Executable] = None) -> None:
        if stmt is not None and not isinstance(stmt, Select):
            raise RepositoryReadOnlyViolation(
                f"Repositories are read-only: only SELECT is allowed (got {type(stmt).__name__})."
            )
        pending = _pending(self._session)
        if pending:
            raise RepositoryReadOnlyViolation(f"Repositories are read-only: session has unflushed changes ({pending}).")

    def _execute(self, stmt: Executable, *, params: Optional[dict[str, Any]] = None) -> Result[Any]:
        self._guard(stmt)
        result = self._session.execute(stmt, params or {})
        self._guard()
        return result
