from __future__ import annotations

import uuid

import pytest
from sqlalchemy import func, select

from app.core.errors import Forbidden, InvalidArgument, InvalidState, NotFound
from app.models.conviction import Conviction
from app.models.signal import ResolvedSignalMutationError
from app.services.challenge_service import create_challenge
from app.services.conviction_service import submit_conviction
from app.services.signal_service import (
    create_signal,
    delete_signal,
    get_signal,
    list_signals,
    resolve_signal,
    update_signal,
)


def _create(db, user, **kw):
    params = {"content": "ETH flips BTC market cap in 2027", "category": "Finance", "timeframe": "1y"}
    params.update(kw)
    return create_signal(db, user.id, **params)


def test_new_signal_starts_neutral(db_session, make_user):
    user = make_user()
    signal = _create(db_session, user)

    assert signal.consensus == pytest.approx(50.0)
    assert signal.momentum == 0.0
    assert signal.participant_count == 0
    assert signal.resolved_at is None


def test_low_credibility_cannot_post(db_session, make_user):
    user = make_user(credibility=24.9)
    with pytest.raises(Forbidden):
        _create(db_session, user)


def test_posting_threshold_is_configurable(db_session, make_user, monkeypatch):
    monkeypatch.setenv("CE_MIN_CREDIBILITY_TO_POST", "10")
    user = make_user(credibility=12)
    assert _create(db_session, user).user_id == user.id


def test_unknown_author(db_session):
    with pytest.raises(NotFound):
        create_signal(db_session, uuid.uuid4(), content="x" * 20, category="Finance")


def test_resolve_freezes_signal(db_session, make_user):
    owner = make_user()
    signal = _create(db_session, owner)

    resolved = resolve_signal(db_session, owner.id, signal.id, 100.0)
    assert resolved.is_resolved
    assert resolved.resolved_value == 100.0

    with pytest.raises(InvalidState):
        resolve_signal(db_session, owner.id, signal.id, -100.0)
    with pytest.raises(InvalidState):
        submit_conviction(db_session, owner.id, signal.id, 10)

    signal = get_signal(db_session, signal.id)
    signal.content = "Rewritten after the fact"
    with pytest.raises(ResolvedSignalMutationError):
        db_session.flush()
    db_session.rollback()

    signal = get_signal(db_session, signal.id)
    db_session.delete(signal)
    with pytest.raises(ResolvedSignalMutationError):
        db_session.flush()
    db_session.rollback()


def test_only_owner_resolves(db_session, make_user):
    owner = make_user()
    other = make_user()
    signal = _create(db_session, owner)

    with pytest.raises(Forbidden):
        resolve_signal(db_session, other.id, signal.id, 1.0)


def test_list_signals_sorting_and_filters(db_session, make_user):
    owner = make_user()
    fans = [make_user() for _ in range(2)]
    quiet = _create(db_session, owner, category="Science")
    busy = _create(db_session, owner)
    for f in fans:
        submit_conviction(db_session, f.id, busy.id, 80)

    page = list_signals(db_session, sort_by="participants")
    assert [s.id for s in page.signals] == [busy.id, quiet.id]
    assert page.total == 2
    assert not page.has_next

    science = list_signals(db_session, category="Science")
    assert [s.id for s in science.signals] == [quiet.id]

    first = list_signals(db_session, limit=1)
    assert first.total_pages == 2
    assert first.has_next and not first.has_prev


def test_list_signals_rejects_unknown_sort(db_session):
    with pytest.raises(InvalidArgument):
        list_signals(db_session, sort_by="hotness")


def test_owner_updates_unresolved_signal(db_session, make_user):
    owner = make_user()
    signal = _create(db_session, owner)

    updated = update_signal(db_session, owner.id, signal.id, content="ETH flips BTC market cap in 2028", timeframe="2y")

    assert updated.content == "ETH flips BTC market cap in 2028"
    assert updated.timeframe == "2y"
    assert updated.category == "Finance"


def test_update_rules(db_session, make_user):
    owner = make_user()
    other = make_user()
    signal = _create(db_session, owner)

    with pytest.raises(Forbidden):
        update_signal(db_session, other.id, signal.id, content="Hijacked statement text")
    with pytest.raises(NotFound):
        update_signal(db_session, owner.id, uuid.uuid4(), content="Nothing to edit here")

    resolve_signal(db_session, owner.id, signal.id, 50.0)
    with pytest.raises(InvalidState):
        update_signal(db_session, owner.id, signal.id, content="Rewritten after the fact")

    db_session.expire_all()
    assert get_signal(db_session, signal.id).content == "ETH flips BTC market cap in 2027"


def test_delete_cascades_convictions(db_session, make_user):
    owner = make_user()
    fan = make_user()
    signal = _create(db_session, owner)
    submit_conviction(db_session, fan.id, signal.id, 40)

    with pytest.raises(Forbidden):
        delete_signal(db_session, fan.id, signal.id)

    delete_signal(db_session, owner.id, signal.id)

    with pytest.raises(NotFound):
        get_signal(db_session, signal.id)
    remaining = db_session.execute(
        select(func.count(Conviction.id)).where(Conviction.signal_id == signal.id)
    ).scalar_one()
    assert remaining == 0


def test_delete_refused_when_resolved_or_challenged(db_session, make_user):
    owner = make_user()
    rival = make_user()
    resolved = _create(db_session, owner)
    resolve_signal(db_session, owner.id, resolved.id, -100.0)
    with pytest.raises(InvalidState):
        delete_signal(db_session, owner.id, resolved.id)

    contested = _create(db_session, owner)
    create_challenge(db_session, rival.id, contested.id, owner.id, 10)
    with pytest.raises(InvalidState):
        delete_signal(db_session, owner.id, contested.id)
    assert get_signal(db_session, contested.id).id == contested.id
