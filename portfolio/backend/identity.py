"""Supabase Auth (GoTrue) client.

Only two endpoints are used:

- ``GET  /auth/v1/user``         -- resolve an access token to its user.
- ``POST /auth/v1/admin/users``  -- create a user (service-role key; CLI only).

Token expiry and signature checks are the provider's job; this client just
asks it.  No retries: a failed call fails the request.
"""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from portfolio.backend.errors import UnauthenticatedError
from portfolio.backend.models.api import Principal

DEFAULT_TIMEOUT = httpx.Timeout(10.0, connect=5.0)


class IdentityProviderError(RuntimeError):
    """Raised when an admin call to the provider fails."""


class SupabaseIdentityProvider:
    """Resolves bearer tokens to principals via Supabase Auth.

    Args:
        url: Project URL, e.g. ``https://abc.supabase.co``.
        anon_key: Public API key sent as the ``apikey`` header.
        client: Optional shared ``httpx.AsyncClient``.  Tests pass one built
            on ``httpx.MockTransport``.
    """

    def __init__(self, url: str, anon_key: str, client: httpx.AsyncClient | None = None) -> None:
        self._url = url.rstrip("/")
        self._anon_key = anon_key
        self._client = client or httpx.AsyncClient(timeout=DEFAULT_TIMEOUT)

    @property
    def url(self) -> str:
        return self._url

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get_principal(self, token: str) -> Principal:
        """Validate *token* with the provider and return its principal.

        Raises ``UnauthenticatedError`` if the provider rejects the token or
        cannot be reached.
        """
        try:
            resp = await self._client.get(
                f"{self._url}/auth/v1/user",
                headers={"apikey": self._anon_key, "Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as e:
            logger.warning("Identity provider unreachable: {}", e)
            msg = "Identity provider unavailable"
            raise UnauthenticatedError(msg) from e

        if resp.status_code in (400, 401, 403, 404):
            raise UnauthenticatedError("Invalid or expired token")
        if resp.is_error:
            logger.warning("Identity provider returned {} for token check", resp.status_code)
            msg = "Identity provider unavailable"
            raise UnauthenticatedError(msg)

        try:
            return principal_from_user(resp.json())
        except (ValueError, AttributeError) as e:
            logger.warning("Identity provider returned an unreadable user: {}", e)
            msg = "Identity provider unavailable"
            raise UnauthenticatedError(msg) from e

    async def create_user(self, email: str, password: str, service_role_key: str, role: str = "admin") -> dict:
        """Create a confirmed user carrying *role* in its user metadata."""
        resp = await self._client.post(
            f"{self._url}/auth/v1/admin/users",
            headers={"apikey": service_role_key, "Authorization": f"Bearer {service_role_key}"},
            json={
                "email": email,
                "password": password,
                "email_confirm": True,
                "user_metadata": {"role": role, "username": email.split("@", 1)[0]},
            },
        )
        if resp.is_error:
            msg = f"Create user failed ({resp.status_code}): {resp.text}"
            raise IdentityProviderError(msg)
        return resp.json()


def principal_from_user(user: dict[str, Any]) -> Principal:
    """Map a GoTrue user object to a ``Principal``.

    The role is looked up in ``user_metadata``, then ``app_metadata``, then
    the top-level ``role`` claim (which GoTrue sets to ``authenticated``).
    """
    role = (
        (user.get("user_metadata") or {}).get("role")
        or (user.get("app_metadata") or {}).get("role")
        or user.get("role")
    )
    return Principal(user_id=user.get("id"), email=user.get("email"), role=role)
