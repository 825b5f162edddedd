from __future__ import annotations

import os

import pytest

from app.core.config import get_hourly_limit, get_min_credibility_to_post, get_momentum_settings
from app.core.env import load_env_if_present, parse_env_line


def test_parse_env_line():
    assert parse_env_line("DATABASE_URL=postgresql://x") == ("DATABASE_URL", "postgresql://x")
    assert parse_env_line('export CE_JWT_SECRET="s3cret"') == ("CE_JWT_SECRET", "s3cret")
    assert parse_env_line("A='b=c'") == ("A", "b=c")
    assert parse_env_line("# comment") is None
    assert parse_env_line("   ") is None
    assert parse_env_line("NO_EQUALS") is None


def test_env_file_does_not_override_live_env(tmp_path, monkeypatch):
    env_file = tmp_path / "test.env"
    env_file.write_text("CE_TEST_FROM_FILE=file\nCE_TEST_LIVE=file\n", encoding="utf-8")
    monkeypatch.setenv("CE_ENV_FILE", str(env_file))
    monkeypatch.setenv("CE_TEST_LIVE", "live")
    # Register CE_TEST_FROM_FILE for restoration, then make sure it is unset.
    monkeypatch.setenv("CE_TEST_FROM_FILE", "placeholder")
    monkeypatch.delenv("CE_TEST_FROM_FILE")

    load_env_if_present()

    assert os.environ["CE_TEST_FROM_FILE"] == "file"
    assert os.environ["CE_TEST_LIVE"] == "live"


def test_defaults(monkeypatch):
    for name in ("CE_MOMENTUM_WINDOW_HOURS", "CE_MOMENTUM_DECAY_HOURS", "CE_MOMENTUM_SCALE",
                 "CE_MIN_CREDIBILITY_TO_POST", "CE_RATE_LIMIT_PER_HOUR"):
        monkeypatch.delenv(name, raising=False)

    s = get_momentum_settings()
    assert (s.window_hours, s.decay_hours, s.scale, s.cap) == (24.0, 12.0, 10.0, 100.0)
    assert get_min_credibility_to_post() == 25.0
    assert get_hourly_limit() == 600


def test_invalid_values_fail_loudly(monkeypatch):
    monkeypatch.setenv("CE_MOMENTUM_SCALE", "fast")
    with pytest.raises(RuntimeError):
        get_momentum_settings()

    monkeypatch.setenv("CE_MOMENTUM_SCALE", "0")
    with pytest.raises(RuntimeError):
        get_momentum_settings()

    monkeypatch.setenv("CE_RATE_LIMIT_PER_HOUR", "-1")
    with pytest.raises(RuntimeError):
        get_hourly_limit()
