"""SQLAlchemy models package.

All ORM classes are imported here so mapper configuration (string-based
relationship targets) never depends on import order.
"""

from app.models import (  # noqa: F401
    challenge,
    conviction,
    credibility_history,
    signal,
    user,
)
