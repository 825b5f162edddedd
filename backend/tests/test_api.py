from __future__ import annotations

import inspect
import uuid

import pytest
from fastapi.routing import APIRoute
from fastapi.testclient import TestClient

from app.api.deps import get_db_session
from app.main import app
from app.security.rate_limit import LIMITER
from conftest import make_jwt


SECRET = "test-secret"


@pytest.fixture()
def client(monkeypatch, db_session, session_factory):
    monkeypatch.setenv("CE_JWT_SECRET", SECRET)
    LIMITER.reset()

    def _session():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db_session] = _session
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _auth(user_id, role: str = "MEMBER") -> dict[str, str]:
    return {"Authorization": f"Bearer {make_jwt(str(user_id), role, SECRET)}"}


def test_requires_bearer_token(client):
    r = client.get("/v1/signals")
    assert r.status_code == 401


def test_rejects_bad_signature(client):
    token = make_jwt(str(uuid.uuid4()), "MEMBER", "other-secret")
    r = client.get("/v1/signals", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401


def test_provisioning_requires_admin(client):
    body = {"handle": "oracle", "name": "Oracle", "email": "oracle@example.com"}
    r = client.post("/v1/users", json=body, headers=_auth(uuid.uuid4()))
    assert r.status_code == 403


def test_register_user_then_duplicate_conflicts(client):
    body = {"handle": "oracle", "name": "Oracle", "email": "oracle@example.com"}
    r = client.post("/v1/users", json=body, headers=_auth(uuid.uuid4(), "ADMIN"))
    assert r.status_code == 201
    user = r.json()
    assert user["credibility_score"] == 50.0
    assert user["daily_points"] == 100

    r = client.get(f"/v1/credibility/{user['id']}/history", headers=_auth(user["id"]))
    assert r.status_code == 200
    assert [h["reason"] for h in r.json()] == ["Account creation"]

    r = client.post("/v1/users", json=body, headers=_auth(uuid.uuid4(), "ADMIN"))
    assert r.status_code == 409
    assert r.json()["kind"] == "CONFLICT"


def test_conviction_moves_consensus(client, make_user, make_signal):
    owner = make_user()
    voter = make_user(credibility=50)
    signal = make_signal(owner)

    r = client.get(f"/v1/signals/{signal.id}/convictions/me", headers=_auth(voter.id))
    assert r.status_code == 200
    assert r.json() is None

    r = client.post(f"/v1/signals/{signal.id}/convictions", json={"value": 50}, headers=_auth(voter.id))
    assert r.status_code == 200
    assert r.json()["weight"] == pytest.approx(0.5)

    r = client.get(f"/v1/signals/{signal.id}", headers=_auth(voter.id))
    assert r.json()["consensus"] == pytest.approx(75.0)
    assert r.json()["participant_count"] == 1

    r = client.post(f"/v1/signals/{signal.id}/convictions", json={"value": 150}, headers=_auth(voter.id))
    assert r.status_code == 400
    assert r.json()["kind"] == "INVALID_ARGUMENT"


def test_resolved_signal_rejects_convictions(client, make_user, make_signal):
    owner = make_user()
    signal = make_signal(owner)

    r = client.post(f"/v1/signals/{signal.id}/resolve", json={"resolved_value": 100}, headers=_auth(owner.id))
    assert r.status_code == 200
    assert r.json()["resolved_value"] == 100

    r = client.post(f"/v1/signals/{signal.id}/convictions", json={"value": 10}, headers=_auth(owner.id))
    assert r.status_code == 409
    assert r.json() == {"detail": "Cannot convict a resolved signal", "kind": "INVALID_STATE"}


def test_challenge_flow_over_http(client, make_user, make_signal):
    challenger = make_user(points=100)
    target = make_user(points=50)
    signal = make_signal(challenger)

    r = client.post(
        f"/v1/signals/{signal.id}/challenges",
        json={"target_id": str(target.id), "stake_amount": 120},
        headers=_auth(challenger.id),
    )
    assert r.status_code == 400

    r = client.post(
        f"/v1/signals/{signal.id}/challenges",
        json={"target_id": str(target.id), "stake_amount": 20},
        headers=_auth(challenger.id),
    )
    assert r.status_code == 201
    challenge_id = r.json()["id"]
    assert r.json()["status"] == "PENDING"

    r = client.post(f"/v1/challenges/{challenge_id}/accept", headers=_auth(target.id))
    assert r.status_code == 200
    assert r.json()["status"] == "ACCEPTED"

    body = {"winner_id": str(target.id)}
    r = client.post(f"/v1/challenges/{challenge_id}/resolve", json=body, headers=_auth(target.id))
    assert r.status_code == 403

    r = client.post(f"/v1/challenges/{challenge_id}/resolve", json=body, headers=_auth(uuid.uuid4(), "ADMIN"))
    assert r.status_code == 200
    assert r.json()["winner_id"] == str(target.id)

    r = client.get(f"/v1/users/{target.id}", headers=_auth(target.id))
    assert r.json()["daily_points"] == 70
    assert r.json()["credibility_score"] == pytest.approx(55.0)

    r = client.get(f"/v1/users/{target.id}/challenges", params={"status": "RESOLVED"}, headers=_auth(target.id))
    assert [c["id"] for c in r.json()] == [challenge_id]


def test_insufficient_points_is_payment_required(client, make_user, make_signal):
    challenger = make_user(points=10)
    signal = make_signal(make_user())

    r = client.post(
        f"/v1/signals/{signal.id}/challenges",
        json={"stake_amount": 20},
        headers=_auth(challenger.id),
    )
    assert r.status_code == 402
    assert r.json()["kind"] == "PAYMENT_REQUIRED"


def test_unknown_signal_is_not_found(client):
    r = client.get(f"/v1/signals/{uuid.uuid4()}", headers=_auth(uuid.uuid4()))
    assert r.status_code == 404
    assert r.json()["kind"] == "NOT_FOUND"


def test_request_id_is_echoed(client):
    r = client.get("/v1/credibility/leaderboard", headers={**_auth(uuid.uuid4()), "x-request-id": "req-123"})
    assert r.status_code == 200
    assert r.headers["x-request-id"] == "req-123"


def test_boolean_conviction_value_rejected(client, make_user, make_signal):
    voter = make_user()
    signal = make_signal(make_user())

    r = client.post(f"/v1/signals/{signal.id}/convictions", json={"value": True}, headers=_auth(voter.id))
    assert r.status_code == 422


def test_edit_and_delete_own_signal(client, make_user, make_signal):
    owner = make_user()
    other = make_user()
    signal = make_signal(owner)

    r = client.patch(f"/v1/signals/{signal.id}", json={"topic": "crypto"}, headers=_auth(other.id))
    assert r.status_code == 403
    assert r.json()["kind"] == "FORBIDDEN"

    r = client.patch(f"/v1/signals/{signal.id}", json={"topic": "crypto"}, headers=_auth(owner.id))
    assert r.status_code == 200
    assert r.json()["topic"] == "crypto"

    r = client.delete(f"/v1/signals/{signal.id}", headers=_auth(owner.id))
    assert r.status_code == 204
    r = client.get(f"/v1/signals/{signal.id}", headers=_auth(owner.id))
    assert r.status_code == 404


def test_resolved_signal_cannot_be_edited(client, make_user, make_signal):
    owner = make_user()
    signal = make_signal(owner)
    client.post(f"/v1/signals/{signal.id}/resolve", json={"resolved_value": -40}, headers=_auth(owner.id))

    r = client.patch(f"/v1/signals/{signal.id}", json={"content": "A different statement now"}, headers=_auth(owner.id))
    assert r.status_code == 409
    assert r.json() == {"detail": "Cannot update resolved signals", "kind": "INVALID_STATE"}


def test_consensus_history_endpoint(client, make_user, make_signal):
    voter = make_user(credibility=80)
    signal = make_signal(make_user())
    client.post(f"/v1/signals/{signal.id}/convictions", json={"value": 50}, headers=_auth(voter.id))

    r = client.get(f"/v1/signals/{signal.id}/consensus-history", headers=_auth(voter.id))
    assert r.status_code == 200
    points = r.json()
    assert len(points) == 1
    assert points[0]["consensus"] == pytest.approx(75.0)
    assert points[0]["participant_count"] == 1


def test_endpoints_run_in_threadpool():
    # Blocking DB calls must stay off the event loop.
    endpoints = [r.endpoint for r in app.routes if isinstance(r, APIRoute) and r.path.startswith("/v1")]
    assert endpoints
    assert not [e.__name__ for e in endpoints if inspect.iscoroutinefunction(e)]
