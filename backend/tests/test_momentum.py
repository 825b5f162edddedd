from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone

import pytest

from app.core.config import MomentumSettings
from app.models.conviction import Conviction
from scoring.core.errors import InvalidConvictionInput
from scoring.core.momentum import MomentumScorer, TimedConviction
from scoring.job.run_momentum_evaluation import recompute_momentum, run_momentum_evaluation_job


UTC = timezone.utc
NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


def _c(value: float, weight: float, hours_ago: float) -> TimedConviction:
    return TimedConviction(value=value, weight=weight, created_at=NOW - timedelta(hours=hours_ago))


def test_fresh_conviction_counts_fully():
    assert MomentumScorer().score([_c(50, 0.8, 0)], NOW) == pytest.approx(50 * 0.8 / 10)


def test_decay_uses_twelve_hour_constant():
    got = MomentumScorer().score([_c(-100, 1.0, 12)], NOW)
    assert got == pytest.approx(100 * math.exp(-1) / 10)


def test_convictions_outside_window_are_ignored():
    assert MomentumScorer().score([_c(100, 1.0, 24.5)], NOW) == 0.0


def test_score_is_capped():
    many = [_c(100, 2.0, 0) for _ in range(20)]
    assert MomentumScorer().score(many, NOW) == 100.0


def test_non_increasing_as_time_advances():
    scorer = MomentumScorer()
    convictions = [_c(80, 0.9, 1), _c(-40, 0.3, 6), _c(10, 1.2, 20)]
    scores = [scorer.score(convictions, NOW + timedelta(hours=h)) for h in range(0, 30, 2)]
    assert all(a >= b for a, b in zip(scores, scores[1:]))
    assert scores[-1] == 0.0


def test_future_timestamps_do_not_amplify():
    scorer = MomentumScorer()
    assert scorer.score([_c(50, 1.0, -2)], NOW) == pytest.approx(scorer.score([_c(50, 1.0, 0)], NOW))


def test_naive_timestamps_are_read_as_utc():
    naive = TimedConviction(value=50, weight=1.0, created_at=(NOW - timedelta(hours=3)).replace(tzinfo=None))
    assert MomentumScorer().score([naive], NOW) == pytest.approx(MomentumScorer().score([_c(50, 1.0, 3)], NOW))


def test_tunable_settings():
    scorer = MomentumScorer(MomentumSettings(window_hours=48, decay_hours=24, scale=5))
    assert scorer.score([_c(100, 1.0, 30)], NOW) == pytest.approx(100 * math.exp(-30 / 24) / 5)


def test_negative_weight_rejected():
    with pytest.raises(InvalidConvictionInput):
        MomentumScorer().score([_c(10, -1.0, 0)], NOW)


def test_recompute_momentum_persists_value(db_session, make_user, make_signal):
    owner = make_user()
    voter = make_user(credibility=80)
    signal = make_signal(owner)
    c = Conviction(user_id=voter.id, signal_id=signal.id, value=50, weight=0.8, created_at=NOW - timedelta(hours=2))
    old = Conviction(user_id=owner.id, signal_id=signal.id, value=100, weight=0.5, created_at=NOW - timedelta(hours=30))
    db_session.add_all([c, old])
    db_session.commit()

    momentum = recompute_momentum(db_session, signal.id, NOW)
    db_session.commit()

    expected = 50 * 0.8 * math.exp(-2 / 12) / 10
    assert momentum == pytest.approx(expected)
    db_session.refresh(signal)
    assert signal.momentum == pytest.approx(expected)

    # Same inputs, same instant: same result.
    assert recompute_momentum(db_session, signal.id, NOW) == pytest.approx(expected)


def test_job_skips_resolved_signals(db_session, make_user, make_signal):
    owner = make_user()
    open_signal = make_signal(owner)
    closed_signal = make_signal(owner)
    for s in (open_signal, closed_signal):
        db_session.add(Conviction(user_id=owner.id, signal_id=s.id, value=60, weight=0.5, created_at=NOW))
    closed_signal.resolved_at = NOW
    closed_signal.resolved_value = 1.0
    db_session.commit()

    summary = run_momentum_evaluation_job(db_session, NOW)

    assert summary["status"] == "success"
    assert summary["evaluated_signals"] == 1
    assert summary["updated_signals"] == 1
    db_session.refresh(open_signal)
    db_session.refresh(closed_signal)
    assert open_signal.momentum == pytest.approx(3.0)
    assert closed_signal.momentum == 0.0


def test_job_with_no_signals(db_session):
    assert run_momentum_evaluation_job(db_session, NOW)["status"] == "no_active_signals"
