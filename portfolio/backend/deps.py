"""FastAPI dependency injection for the project store and the auth gate.

Usage in route handlers::

    @router.put("/project/{project_id}")
    async def update_project(project_id: int, body: ProjectUpdate, store: Store) -> ...:
        ...

Both objects are created once in the app lifespan and kept on ``app.state``.
Dependencies raise HTTP 503 if the lifespan did not set them up.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from portfolio.backend.auth import AuthGate, extract_bearer
from portfolio.backend.errors import ForbiddenError, UnauthenticatedError
from portfolio.backend.models.api import Principal
from portfolio.backend.store.base import ProjectStore


def get_project_store(request: Request) -> ProjectStore:
    store: ProjectStore | None = getattr(request.app.state, "project_store", None)
    if store is None:
        raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, detail="Project store not initialised.")
    return store


def get_auth_gate(request: Request) -> AuthGate:
    gate: AuthGate | None = getattr(request.app.state, "auth_gate", None)
    if gate is None:
        raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, detail="Auth gate not initialised.")
    return gate


async def require_admin(request: Request, gate: Annotated[AuthGate, Depends(get_auth_gate)]) -> Principal | None:
    """Pass the request through the auth gate.

    The resolved principal (``None`` in shared-secret mode) is also stored on
    ``request.state.principal``.
    """
    try:
        token = extract_bearer(request.headers.get("authorization"))
        principal = await gate.authorize(token)
    except UnauthenticatedError as e:
        raise HTTPException(
            status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        ) from None
    except ForbiddenError as e:
        raise HTTPException(status.HTTP_403_FORBIDDEN, detail=str(e)) from None

    request.state.principal = principal
    return principal


# -- Annotated type aliases for concise route signatures ---------------------

Store = Annotated[ProjectStore, Depends(get_project_store)]
"""Annotated dependency: the project store chosen at startup."""

Gate = Annotated[AuthGate, Depends(get_auth_gate)]
"""Annotated dependency: the auth gate chosen at startup."""

AdminPrincipal = Annotated[Principal | None, Depends(require_admin)]
"""Annotated dependency: runs the gate; the principal, or None for the shared secret."""
