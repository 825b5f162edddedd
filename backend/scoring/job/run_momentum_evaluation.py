from __future__ import annotations

"""Momentum evaluation job.

Recomputes the time-decayed momentum of every unresolved signal and overwrites
the stored value. Runs outside the conviction write path (cron / worker) and
may read a slightly stale conviction set.

- Stateless: no momentum history is kept; each run overwrites.
- Idempotent for a fixed conviction set and evaluation time.
- Failure-tolerant: one bad signal is logged and skipped.

Run:
  python -m scoring.job.run_momentum_evaluation
"""

import json
import logging
import sys
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

# Ensure backend/ is importable as top-level `app`.
BASE_DIR = Path(__file__).resolve().parents[2]
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

from app.core.config import get_momentum_settings  # noqa: E402
from app.core.db import SessionLocal  # noqa: E402
from app.core.env import load_env_if_present  # noqa: E402
import app.models as _models  # noqa: F401,E402
from app.models.conviction import Conviction  # noqa: E402
from app.models.signal import Signal  # noqa: E402
from scoring.core.errors import ScoringError  # noqa: E402
from scoring.core.momentum import MomentumScorer, TimedConviction  # noqa: E402


UTC = timezone.utc
logger = logging.getLogger("conviction_engine.momentum")


def _log(event: dict) -> None:
    logger.info(json.dumps(event, ensure_ascii=False, default=str))


def recompute_momentum(
    session: Session,
    signal_id: uuid.UUID,
    now: Optional[datetime] = None,
    *,
    scorer: Optional[MomentumScorer] = None,
) -> Optional[float]:
    """Recompute and stage one signal's momentum; returns None if the signal is gone.

    The caller commits.
    """
    now = now or datetime.now(tz=UTC)
    scorer = scorer or MomentumScorer(get_momentum_settings())

    signal = session.get(Signal, signal_id)
    if signal is None:
        return None

    stmt = (
        select(Conviction.value, Conviction.weight, Conviction.created_at)
        .where(Conviction.signal_id == signal_id)
        .where(Conviction.created_at >= scorer.window_start(now))
    )
    recent = [
        TimedConviction(value=row.value, weight=row.weight, created_at=row.created_at)
        for row in session.execute(stmt).all()
    ]

    momentum = scorer.score(recent, now)
    signal.momentum = momentum
    return momentum


def run_momentum_evaluation_job(session: Session, now: Optional[datetime] = None) -> dict:
    """Evaluate all unresolved signals and commit once."""
    now = now or datetime.now(tz=UTC)
    scorer = MomentumScorer(get_momentum_settings())

    stmt = select(Signal.id).where(Signal.resolved_at.is_(None))
    signal_ids = list(session.execute(stmt).scalars().all())
    if not signal_ids:
        return {"status": "no_active_signals", "evaluated_signals": 0, "updated_signals": 0, "errors": 0}

    updated = 0
    errors = 0
    for sid in signal_ids:
        try:
            # Scoring raises before the signal is touched, so a failure stages nothing.
            if recompute_momentum(session, sid, now, scorer=scorer) is not None:
                updated += 1
        except ScoringError as ex:
            errors += 1
            logger.error(f"Momentum evaluation failed for signal {sid}: {ex}", exc_info=True)

    session.commit()

    return {
        "status": "success",
        "evaluated_signals": len(signal_ids),
        "updated_signals": updated,
        "errors": errors,
    }


def main() -> int:
    load_env_if_present()
    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO, format="%(message)s")
    logger.setLevel(logging.INFO)

    now = datetime.now(tz=UTC)
    db = SessionLocal()
    try:
        summary = run_momentum_evaluation_job(db, now)
        _log({"event": "momentum_evaluated", "evaluated_at": now.isoformat(), **summary})
        return 0
    except Exception as ex:  # noqa: BLE001
        db.rollback()
        _log(
            {
                "event": "momentum_failed",
                "evaluated_at": now.isoformat(),
                "errors": 1,
                "error_type": type(ex).__name__,
            }
        )
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    raise SystemExit(main())
