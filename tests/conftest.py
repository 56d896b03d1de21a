"""Shared fixtures: a temporary database per test and a signed-in client."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from cashbook.core.config import Settings
from cashbook.db.dal import Database
from cashbook.main import create_app


@pytest.fixture()
def settings(tmp_path) -> Settings:
    s = Settings(
        data_dir=tmp_path,
        db_path=tmp_path / "test.sqlite3",
        debug=False,
        civil_timezone="Asia/Dhaka",
    )
    s.init_post_load()
    return s


@pytest.fixture()
def app(settings):
    return create_app(settings_override=settings)


@pytest.fixture()
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def db(app, settings) -> Database:
    # depends on app so the schema has been applied
    return Database(settings.db_path)


def sign_up(client: TestClient, email: str, password: str = "secret123") -> dict:
    r = client.post("/auth/signup", json={"email": email, "password": password})
    assert r.status_code == 201, r.text
    body = r.json()
    return {"Authorization": f"Bearer {body['access_token']}"}


@pytest.fixture()
def auth_headers(client) -> dict:
    return sign_up(client, "rahim@example.com")


@pytest.fixture()
def other_headers(client) -> dict:
    return sign_up(client, "karim@example.com")
