"""Shared fixtures: a fresh SQLite file per test and a TestClient bound to it."""
import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    from teenhelp.core import config
    from teenhelp import container
    from teenhelp.persistence.db import init_db

    path = str(tmp_path / "test.db")
    monkeypatch.setattr(config, "DATABASE_PATH", path)
    container.reset()
    init_db()
    return path


@pytest.fixture
def client(db_path):
    from teenhelp.main import app
    return TestClient(app)


def login(client, username, password):
    resp = client.post("/auth/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.text
    data = resp.json()["data"]
    return {"Authorization": f"Bearer {data['token']}"}, data["user"]["id"]


@pytest.fixture
def admin_headers(client):
    headers, _ = login(client, "admin", "admin")
    return headers


@pytest.fixture
def make_user(client, admin_headers):
    """Register a user, optionally promote them through the admin endpoint, and return auth headers + id."""

    def _make(username, role=None, user_type=None):
        resp = client.post(
            "/auth/register",
            json={"username": username, "password": "secret123"},
        )
        assert resp.status_code == 201, resp.text
        user_id = resp.json()["data"]["user"]["id"]
        if role is not None or user_type is not None:
            resp = client.put(
                f"/auth/users/{user_id}/role",
                json={"role": role or "user", "user_type": user_type},
                headers=admin_headers,
            )
            assert resp.status_code == 200, resp.text
        headers, _ = login(client, username, "secret123")
        return headers, user_id

    return _make
