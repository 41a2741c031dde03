"""Shared fixtures for backend tests.

The app lifespan does NOT run under ``ASGITransport``, so the client
fixtures set the ``app.state`` fields it would normally create.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import StaticPool

from portfolio.backend.app import app
from portfolio.backend.auth import ProviderGate, SharedSecretGate
from portfolio.backend.db.engine import create_engine, create_session_factory
from portfolio.backend.db.tables import Base
from portfolio.backend.identity import SupabaseIdentityProvider
from portfolio.backend.models.api import AdminStatus
from portfolio.backend.store.local import FileProjectStore
from portfolio.backend.store.table import TableProjectStore

ADMIN_TOKEN = "test-admin-token"
SUPABASE_URL = "https://example.supabase.co"
ANON_KEY = "anon-key"

# Tokens understood by the fake identity provider.
PROVIDER_USERS = {
    "admin-jwt": {
        "id": "user-admin",
        "email": "Owner@Example.com",
        "role": "authenticated",
        "user_metadata": {"role": "admin", "username": "owner"},
    },
    "viewer-jwt": {
        "id": "user-viewer",
        "email": "viewer@example.com",
        "role": "authenticated",
        "user_metadata": {},
    },
}


def fake_gotrue(request: httpx.Request) -> httpx.Response:
    """Minimal stand-in for ``GET /auth/v1/user``."""
    if request.url.path != "/auth/v1/user":
        return httpx.Response(404, json={"msg": "not found"})
    if request.headers.get("apikey") != ANON_KEY:
        return httpx.Response(401, json={"msg": "No API key found in request"})
    token = request.headers.get("authorization", "").removeprefix("Bearer ")
    user = PROVIDER_USERS.get(token)
    if user is None:
        return httpx.Response(401, json={"msg": "invalid JWT: token is expired"})
    return httpx.Response(200, json=user)


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}


@pytest.fixture
def file_store(tmp_path) -> FileProjectStore:
    return FileProjectStore(tmp_path / "projects.json")


@pytest.fixture
async def table_store() -> AsyncIterator[TableProjectStore]:
    """Table store over a fresh in-memory SQLite database."""
    engine = create_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield TableProjectStore(create_session_factory(engine))
    await engine.dispose()


@pytest.fixture
async def gotrue_provider() -> AsyncIterator[SupabaseIdentityProvider]:
    provider = SupabaseIdentityProvider(
        SUPABASE_URL,
        ANON_KEY,
        client=httpx.AsyncClient(transport=httpx.MockTransport(fake_gotrue)),
    )
    yield provider
    await provider.aclose()


async def _client_for(store, gate, store_kind: str = "file") -> AsyncIterator[AsyncClient]:
    app.state.project_store = store
    app.state.auth_gate = gate
    app.state.password_login = None
    app.state.admin_status = AdminStatus(auth_mode=gate.mode, store=store_kind)
    app.state.expose_errors = False

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def client(file_store: FileProjectStore) -> AsyncIterator[AsyncClient]:
    """File store + shared-secret gate."""
    async for ac in _client_for(file_store, SharedSecretGate(ADMIN_TOKEN)):
        yield ac


@pytest.fixture
async def table_client(table_store: TableProjectStore) -> AsyncIterator[AsyncClient]:
    """Table store + shared-secret gate."""
    async for ac in _client_for(table_store, SharedSecretGate(ADMIN_TOKEN), store_kind="table"):
        yield ac


@pytest.fixture
async def provider_client(
    file_store: FileProjectStore, gotrue_provider: SupabaseIdentityProvider
) -> AsyncIterator[AsyncClient]:
    """File store + identity-provider gate (role check)."""
    async for ac in _client_for(file_store, ProviderGate(gotrue_provider)):
        yield ac
