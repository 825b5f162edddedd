from __future__ import annotations

"""Controlled errors for the scoring pipeline.

- The momentum job must not crash on one bad signal.
- Errors are logged and processing continues (partial success is success).
"""


class ScoringError(RuntimeError):
    """Base error for scoring; the momentum job catches and logs it per signal."""


class InvalidConvictionInput(ScoringError):
    """Raised when a conviction fed to a scorer is outside its valid domain."""
