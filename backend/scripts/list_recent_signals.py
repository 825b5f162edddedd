from __future__ import annotations

from pathlib import Path
import sys
import json

# Ensure `backend/` is on sys.path when run from repo root
BASE_DIR = Path(__file__).resolve().parents[1]
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

from sqlalchemy import select

from app.core.db import SessionLocal
import app.models  # noqa: F401
from app.models.signal import Signal


def main(limit: int = 10, unresolved_only: bool = False):
    s = SessionLocal()
    try:
        stmt = select(Signal).order_by(Signal.created_at.desc()).limit(limit)
        if unresolved_only:
            stmt = stmt.where(Signal.resolved_at.is_(None))
        out = []
        for it in s.execute(stmt).scalars():
            out.append(
                {
                    "id": str(it.id),
                    "user_id": str(it.user_id),
                    "category": it.category,
                    "content": it.content[:80],
                    "consensus": round(it.consensus, 2),
                    "momentum": round(it.momentum, 2),
                    "participants": it.participant_count,
                    "resolved_value": it.resolved_value,
                    "created_at": it.created_at.isoformat() if it.created_at else None,
                }
            )
        print(json.dumps(out, indent=2, ensure_ascii=False))
    finally:
        s.close()


if __name__ == '__main__':
    import argparse

    p = argparse.ArgumentParser()
    p.add_argument('--limit', type=int, default=10)
    p.add_argument('--unresolved', action='store_true')
    args = p.parse_args()
    main(limit=args.limit, unresolved_only=args.unresolved)
