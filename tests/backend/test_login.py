"""Integration tests for shared-secret password login."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

from portfolio.backend.app import app
from portfolio.backend.auth import PasswordLogin, SharedSecretGate

pytestmark = pytest.mark.integration


@pytest.fixture
def login_enabled(client: AsyncClient) -> None:
    gate = app.state.auth_gate
    assert isinstance(gate, SharedSecretGate)
    app.state.password_login = PasswordLogin("admin", "hunter2", gate)


@pytest.mark.usefixtures("login_enabled")
async def test_login_returns_working_token(client: AsyncClient) -> None:
    resp = await client.post("/api/login", json={"username": "admin", "password": "hunter2"})
    assert resp.status_code == 200
    token = resp.json()["data"]["token"]
    assert token == app.state.auth_gate.token

    created = await client.post(
        "/api/admin/project", json={"title": "Via login"}, headers={"Authorization": f"Bearer {token}"}
    )
    assert created.status_code == 200


@pytest.mark.usefixtures("login_enabled")
async def test_login_wrong_password(client: AsyncClient) -> None:
    resp = await client.post("/api/login", json={"username": "admin", "password": "nope"})
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "message": "Invalid credentials"}


async def test_login_disabled(client: AsyncClient) -> None:
    resp = await client.post("/api/login", json={"username": "admin", "password": "hunter2"})
    assert resp.status_code == 404
    assert resp.json()["success"] is False
