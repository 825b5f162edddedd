"""Role model for access control."""

from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    MEMBER = "MEMBER"
    ADMIN = "ADMIN"


def is_role_allowed(subject_role: Role, allowed: set[Role]) -> bool:
    """Default-deny role check with explicit allow set."""
    return subject_role in allowed
