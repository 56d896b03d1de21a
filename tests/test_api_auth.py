from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from cashbook.core.errors import AuthError
from cashbook.models.auth import Credentials
from cashbook.services import auth as auth_service

from .conftest import sign_up


def test_signup_returns_bearer_session(client) -> None:
    r = client.post("/auth/signup", json={"email": " Rahim@Example.com ", "password": "secret123"})
    assert r.status_code == 201
    body = r.json()
    assert body["token_type"] == "bearer"
    assert body["email"] == "rahim@example.com"
    assert body["access_token"]


def test_signup_rejects_duplicate_and_short_password(client) -> None:
    sign_up(client, "dup@example.com")
    r = client.post("/auth/signup", json={"email": "DUP@example.com", "password": "secret123"})
    assert r.status_code == 409
    assert r.json()["notification"]["variant"] == "destructive"

    r = client.post("/auth/signup", json={"email": "short@example.com", "password": "123"})
    assert r.status_code == 400
    assert "at least 6" in r.json()["detail"]


def test_signup_rejects_malformed_email(client) -> None:
    r = client.post("/auth/signup", json={"email": "not-an-email", "password": "secret123"})
    assert r.status_code == 422
    assert r.json()["error"] == "validation_error"


def test_signin_and_bad_password(client) -> None:
    sign_up(client, "user@example.com")
    ok = client.post("/auth/signin", json={"email": "user@example.com", "password": "secret123"})
    assert ok.status_code == 200
    bad = client.post("/auth/signin", json={"email": "user@example.com", "password": "wrong-pass"})
    assert bad.status_code == 401
    assert bad.json()["error"] == "unauthorized"
    assert bad.headers["WWW-Authenticate"] == "Bearer"


def test_data_routes_require_a_session(client) -> None:
    r = client.get("/expenses")
    assert r.status_code == 401
    assert r.json()["notification"]["description"] == "not signed in"
    r = client.get("/expenses", headers={"Authorization": "Bearer nope"})
    assert r.status_code == 401


def test_signout_revokes_token(client, auth_headers) -> None:
    assert client.get("/profile", headers=auth_headers).status_code == 200
    assert client.post("/auth/signout", headers=auth_headers).status_code == 204
    assert client.get("/profile", headers=auth_headers).status_code == 401


def test_change_password(client, auth_headers) -> None:
    r = client.put("/auth/password", json={"password": "newsecret"}, headers=auth_headers)
    assert r.status_code == 204
    old = client.post("/auth/signin", json={"email": "rahim@example.com", "password": "secret123"})
    assert old.status_code == 401
    new = client.post("/auth/signin", json={"email": "rahim@example.com", "password": "newsecret"})
    assert new.status_code == 200


def test_expired_session_is_rejected(db, settings) -> None:
    creds = Credentials(email="late@example.com", password="secret123")
    auth_service.sign_up(db, creds, settings)
    past = datetime.now(timezone.utc) - timedelta(days=30)
    session = auth_service.sign_in(db, creds, settings, now=past)
    with pytest.raises(AuthError, match="session expired"):
        auth_service.resolve_session(db, session.token)
    assert db.get_session(session.token) is None


def test_profile_upsert(client, auth_headers) -> None:
    r = client.get("/profile", headers=auth_headers)
    assert r.status_code == 200
    assert r.json() is None

    r = client.put("/profile", json={"name": "Rahim"}, headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["name"] == "Rahim"

    r = client.put("/profile", json={"image_url": "https://img.example/r.png"}, headers=auth_headers)
    body = r.json()
    assert body["name"] == "Rahim"
    assert body["image_url"] == "https://img.example/r.png"
    assert client.get("/profile", headers=auth_headers).json()["image_url"] == body["image_url"]


def test_profile_update_needs_a_field(client, auth_headers) -> None:
    r = client.put("/profile", json={}, headers=auth_headers)
    assert r.status_code == 422


def test_unknown_route_returns_not_found(client) -> None:
    r = client.get("/nowhere")
    assert r.status_code == 404
    assert r.json()["error"] == "not_found"


def test_health(client) -> None:
    assert client.get("/health").json()["status"] == "ok"
