"""Integration tests for the public endpoints."""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from portfolio.backend.app import app
from portfolio.backend.store.local import FileProjectStore

pytestmark = pytest.mark.integration


async def test_list_projects_empty(client: AsyncClient) -> None:
    resp = await client.get("/api/projects")
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "data": {"projects": []}}


async def test_list_projects_camel_case(client: AsyncClient, file_store: FileProjectStore) -> None:
    file_store.path.write_text(
        '{"projects": [{"id": 1, "title": "Site", "githubUrl": "https://g", "featured": true}]}',
        encoding="utf-8",
    )

    resp = await client.get("/api/projects")
    assert resp.status_code == 200
    [project] = resp.json()["data"]["projects"]
    assert project["id"] == 1
    assert project["githubUrl"] == "https://g"
    assert project["featured"] is True
    assert "github_url" not in project


async def test_list_projects_corrupt_file(client: AsyncClient, file_store: FileProjectStore) -> None:
    file_store.path.write_text("{broken", encoding="utf-8")

    resp = await client.get("/api/projects")
    assert resp.status_code == 500
    assert resp.json() == {"success": False, "message": "Failed to load projects"}


async def test_admin_status_is_public(client: AsyncClient) -> None:
    resp = await client.get("/api/admin/status")
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "data": {"authMode": "shared_secret", "store": "file"}}


async def test_unknown_route_uses_envelope(client: AsyncClient) -> None:
    resp = await client.get("/api/nope")
    assert resp.status_code == 404
    assert resp.json()["success"] is False


class _BrokenStore(FileProjectStore):
    async def list_all(self):
        raise RuntimeError("disk on fire")


@pytest.mark.parametrize("expose", [False, True])
async def test_unexpected_error_is_opaque(client: AsyncClient, tmp_path, expose: bool) -> None:
    app.state.project_store = _BrokenStore(tmp_path / "projects.json")
    app.state.expose_errors = expose

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        resp = await ac.get("/api/projects")

    assert resp.status_code == 500
    body = resp.json()
    assert body["success"] is False
    assert body["message"] == "Internal server error"
    assert ("error" in body) is expose
    assert "Traceback" not in resp.text


async def test_list_projects_undecodable_file(client: AsyncClient, file_store: FileProjectStore) -> None:
    file_store.path.write_bytes(b"\xff\xfe garbage")

    resp = await client.get("/api/projects")
    assert resp.status_code == 500
    assert resp.json() == {"success": False, "message": "Failed to load projects"}
