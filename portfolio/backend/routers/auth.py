"""Public auth endpoints: admin UI bootstrap and shared-secret login."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request, status

from portfolio.backend.auth import PasswordLogin
from portfolio.backend.errors import UnauthenticatedError
from portfolio.backend.models.api import AdminStatus, ApiResponse, LoginRequest, LoginResponse

router = APIRouter(tags=["auth"])


@router.get("/admin/status", response_model=ApiResponse[AdminStatus], response_model_exclude_none=True)
async def admin_status(request: Request) -> ApiResponse[AdminStatus]:
    """Tell the admin UI which sign-in flow to use."""
    admin_status: AdminStatus = request.app.state.admin_status
    return ApiResponse[AdminStatus](data=admin_status)


@router.post("/login", response_model=ApiResponse[LoginResponse], response_model_exclude_none=True)
async def login(body: LoginRequest, request: Request) -> ApiResponse[LoginResponse]:
    """Exchange the admin username/password for the shared token."""
    password_login: PasswordLogin | None = getattr(request.app.state, "password_login", None)
    if password_login is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Password login is not enabled")

    try:
        token = password_login.login(body.username, body.password)
    except UnauthenticatedError as e:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, detail=str(e)) from None

    return ApiResponse[LoginResponse](data=LoginResponse(token=token), message="Login successful")
