"""API request / response schemas.

Every endpoint answers with the same envelope::

    {"success": true, "data": ..., "message": "..."}

``data`` and ``message`` are omitted when unset (routes use
``response_model_exclude_none=True``).  Failures are rendered by the
exception handlers in ``app`` as ``{"success": false, "message": ...}``.
"""

from __future__ import annotations

from typing import Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    data: T | None = None
    message: str | None = None


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    error: str | None = Field(default=None, description="Exception text; development mode only.")


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class Principal(BaseModel):
    """Caller identity resolved by the identity provider.  Never persisted."""

    user_id: str | None = None
    email: str | None = None
    role: str | None = None


class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    token: str


class SupabasePublicConfig(BaseModel):
    """Public client config handed to the admin UI (the anon key is not a secret)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    url: str
    anon_key: str


class AdminStatus(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    auth_mode: Literal["shared_secret", "provider"]
    store: Literal["file", "table"]
    supabase: SupabasePublicConfig | None = None
