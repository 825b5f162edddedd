"""Domain error taxonomy.

Services raise these after checking preconditions and before mutating
anything. The HTTP layer maps each kind to a status code; the message is the
human-readable reason returned to the caller.
"""

from __future__ import annotations

from typing import ClassVar


class DomainError(RuntimeError):
    """Base class for business-rule failures. Never retried."""

    kind: ClassVar[str] = "DOMAIN_ERROR"
    status_code: ClassVar[int] = 400

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class NotFound(DomainError):
    """A referenced user, signal or challenge does not exist."""

    kind = "NOT_FOUND"
    status_code = 404


class InvalidArgument(DomainError):
    """Out-of-range value, self-targeting or a winner who did not take part."""

    kind = "INVALID_ARGUMENT"
    status_code = 400


class InvalidState(DomainError):
    """Operation not allowed in the entity's current state."""

    kind = "INVALID_STATE"
    status_code = 409


class PaymentRequired(DomainError):
    """Insufficient daily points for a stake."""

    kind = "PAYMENT_REQUIRED"
    status_code = 402


class Conflict(DomainError):
    """Duplicate unique identity (handle, email)."""

    kind = "CONFLICT"
    status_code = 409


class Forbidden(DomainError):
    """Caller is not allowed to act on this entity."""

    kind = "FORBIDDEN"
    status_code = 403
