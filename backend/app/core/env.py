"""`.env` loading for local runs, jobs and migrations.

Production injects configuration through the process environment; the file
is a convenience for development and never overrides what is already set.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator, Optional


ENV_FILE_ENV = "CE_ENV_FILE"

# backend/app/core/env.py -> repo root
_REPO_ROOT = Path(__file__).resolve().parents[3]


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def parse_env_line(line: str) -> Optional[tuple[str, str]]:
    """Parse `KEY=value` (optionally `export`-prefixed); None for blanks and comments."""
    line = line.strip()
    if not line or line.startswith("#"):
        return None
    if line.startswith("export "):
        line = line[len("export "):].lstrip()
    key, sep, value = line.partition("=")
    key = key.strip()
    if not sep or not key:
        return None
    return key, _strip_quotes(value.strip())


def _candidate_files() -> Iterator[Path]:
    explicit = os.environ.get(ENV_FILE_ENV)
    if explicit:
        yield Path(explicit)
    yield _REPO_ROOT / ".env"
    yield _REPO_ROOT / "backend" / ".env"


def load_env_if_present(*, override: bool = False) -> None:
    """Merge the first readable env files into `os.environ`.

    Order: `$CE_ENV_FILE`, repo root `.env`, `backend/.env`. Earlier files win
    over later ones, and the live environment wins unless `override=True`.
    """
    for path in _candidate_files():
        if not path.is_file():
            continue
        try:
            lines = path.read_text(encoding="utf-8").splitlines()
        except OSError:
            continue
        for raw in lines:
            parsed = parse_env_line(raw)
            if parsed is None:
                continue
            key, value = parsed
            if override or key not in os.environ:
                os.environ[key] = value
