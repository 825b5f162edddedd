"""Runtime settings read from the environment.

Every value has a default so the service starts with no configuration beyond
DATABASE_URL. Invalid values fail loudly instead of silently falling back.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from app.core.env import load_env_if_present


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise RuntimeError(f"Invalid {name}: expected a number, got {raw!r}.") from e


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise RuntimeError(f"Invalid {name}: expected an integer, got {raw!r}.") from e


@dataclass(frozen=True, slots=True)
class MomentumSettings:
    window_hours: float = 24.0
    decay_hours: float = 12.0
    scale: float = 10.0
    cap: float = 100.0


def get_momentum_settings() -> MomentumSettings:
    load_env_if_present()
    settings = MomentumSettings(
        window_hours=_env_float("CE_MOMENTUM_WINDOW_HOURS", 24.0),
        decay_hours=_env_float("CE_MOMENTUM_DECAY_HOURS", 12.0),
        scale=_env_float("CE_MOMENTUM_SCALE", 10.0),
    )
    if settings.window_hours <= 0 or settings.decay_hours <= 0 or settings.scale <= 0:
        raise RuntimeError("Momentum settings must be positive.")
    return settings


def get_min_credibility_to_post() -> float:
    load_env_if_present()
    return _env_float("CE_MIN_CREDIBILITY_TO_POST", 25.0)


def get_hourly_limit() -> int:
    load_env_if_present()
    n = _env_int("CE_RATE_LIMIT_PER_HOUR", 600)
    if n <= 0:
        raise RuntimeError("CE_RATE_LIMIT_PER_HOUR must be positive.")
    return n
