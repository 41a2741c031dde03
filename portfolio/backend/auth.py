"""Authorization gate for the admin API.

Two modes, fixed at startup by configuration (see ``app._create_auth_gate``):

- **Shared secret** -- the bearer token must equal the process-wide
  ``auth_token``.  No principal is produced.
- **Provider** -- the token is validated by the identity provider; the
  resulting principal must be the configured admin email (case-insensitive)
  or, when none is configured, carry ``role == "admin"``.

Gates raise ``UnauthenticatedError`` (401) or ``ForbiddenError`` (403);
``deps.require_admin`` turns those into HTTP responses.
"""

from __future__ import annotations

import secrets
from typing import Literal, Protocol

from portfolio.backend.errors import ForbiddenError, UnauthenticatedError
from portfolio.backend.identity import SupabaseIdentityProvider
from portfolio.backend.models.api import Principal

ADMIN_ROLE = "admin"


class AuthGate(Protocol):
    mode: Literal["shared_secret", "provider"]

    async def authorize(self, credential: str) -> Principal | None:
        """Return the caller's principal (or None) or raise."""
        ...


def extract_bearer(header: str | None) -> str:
    """Return the token of an ``Authorization: Bearer <token>`` header."""
    if not header:
        raise UnauthenticatedError("Missing authorization header")
    scheme, _, token = header.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise UnauthenticatedError("Malformed authorization header")
    return token


class SharedSecretGate:
    mode: Literal["shared_secret", "provider"] = "shared_secret"

    def __init__(self, token: str) -> None:
        if not token:
            msg = "Shared secret must not be empty"
            raise ValueError(msg)
        self._token = token

    @property
    def token(self) -> str:
        return self._token

    def matches(self, credential: str) -> bool:
        return secrets.compare_digest(credential.encode("utf-8"), self._token.encode("utf-8"))

    async def authorize(self, credential: str) -> Principal | None:
        if not self.matches(credential):
            raise UnauthenticatedError("Invalid token")
        return None


class ProviderGate:
    mode: Literal["shared_secret", "provider"] = "provider"

    def __init__(self, provider: SupabaseIdentityProvider, admin_email: str | None = None) -> None:
        self._provider = provider
        self._admin_email = admin_email.strip().lower() if admin_email else None

    @property
    def provider(self) -> SupabaseIdentityProvider:
        return self._provider

    async def authorize(self, credential: str) -> Principal:
        principal = await self._provider.get_principal(credential)

        if self._admin_email is not None:
            if (principal.email or "").lower() != self._admin_email:
                raise ForbiddenError("Admin access required")
        elif principal.role != ADMIN_ROLE:
            raise ForbiddenError("Admin access required")

        return principal


class PasswordLogin:
    """Trades the admin username/password for the shared secret.

    Only wired up in shared-secret mode when an admin password is configured;
    in provider mode the admin UI signs in against the provider directly.
    """

    def __init__(self, username: str, password: str, gate: SharedSecretGate) -> None:
        self._username = username
        self._password = password
        self._gate = gate

    def login(self, username: str, password: str) -> str:
        user_ok = secrets.compare_digest(username.encode("utf-8"), self._username.encode("utf-8"))
        password_ok = secrets.compare_digest(password.encode("utf-8"), self._password.encode("utf-8"))
        if not (user_ok and password_ok):
            raise UnauthenticatedError("Invalid credentials")
        return self._gate.token
