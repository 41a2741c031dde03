"""Service configuration loaded from PORTFOLIO_* environment variables."""

from __future__ import annotations

import secrets
from pathlib import Path
from typing import Literal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class PortfolioSettings(BaseSettings):
    """Portfolio backend settings.

    All fields are read from environment variables with the ``PORTFOLIO_``
    prefix.  For example, ``PORTFOLIO_LOG_LEVEL=DEBUG`` maps to ``log_level``.

    Two choices are made once at startup from which fields are present:

    - **Project store**: ``database_url`` set -> SQL table, otherwise the
      JSON file under ``data_root``.
    - **Auth mode**: ``supabase_url`` + ``supabase_anon_key`` set -> tokens
      are validated by the identity provider, otherwise they are compared
      against the shared ``auth_token``.
    """

    model_config = SettingsConfigDict(
        env_prefix="PORTFOLIO_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -- Logging ---------------------------------------------------------------
    log_level: str = "INFO"

    environment: Literal["development", "production"] = "production"
    """``development`` adds the exception message to opaque 500 responses."""

    # -- Data storage ----------------------------------------------------------
    data_root: str = "./data"
    """Root directory for the file-backed project store."""

    data_prefix: str | None = None
    """Optional namespace inserted between ``data_root`` and ``projects.json``."""

    projects_file: str | None = None
    """Explicit path to the projects document.  Overrides data_root/data_prefix."""

    database_url: str | None = None
    """SQLAlchemy async URL.  When set, projects live in the ``projects`` table."""

    # -- Identity provider -----------------------------------------------------
    supabase_url: str | None = None
    supabase_anon_key: str | None = None
    supabase_service_role_key: SecretStr | None = None
    """Only needed by ``portfolio create-admin``; the server never uses it."""

    admin_email: str | None = None
    """When set, only this identity passes the gate (case-insensitive)."""

    # -- Shared-secret mode ----------------------------------------------------
    auth_token: str | None = None
    """Bearer token for admin access.  Auto-generated at startup if empty."""

    admin_username: str = "admin"
    admin_password: SecretStr | None = None
    """Enables ``POST /api/login``, which trades these credentials for the token."""

    # -- Server ----------------------------------------------------------------
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 3001
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:3001",
        "http://localhost:5500",
        "http://127.0.0.1:5500",
    ]
    max_body_bytes: int = 10 * 1024 * 1024
    """Requests declaring a larger ``Content-Length`` are rejected with 413."""

    # -- Helpers ---------------------------------------------------------------

    @property
    def provider_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_anon_key)

    @property
    def store_kind(self) -> Literal["file", "table"]:
        return "table" if self.database_url else "file"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    def resolve_projects_path(self) -> Path:
        """Return the location of the JSON projects document."""
        if self.projects_file:
            return Path(self.projects_file)
        base = Path(self.data_root)
        if self.data_prefix:
            base = base / self.data_prefix
        return base / "projects.json"

    def resolve_auth_token(self) -> str:
        """Return the configured token or generate a random one."""
        if self.auth_token:
            return self.auth_token
        return secrets.token_urlsafe(32)


def get_settings() -> PortfolioSettings:
    """Return a cached settings instance.

    Reads from environment variables and ``.env`` on first call, then returns
    the same object.  Call ``get_settings.cache_clear()`` in tests to force a
    re-read after overriding env vars.
    """
    return _get_settings_cached()


def _get_settings_cached() -> PortfolioSettings:
    """Inner function wrapped by lru_cache (allows type-safe cache_clear)."""
    return PortfolioSettings()


# Apply lru_cache at runtime so the function is only called once.
from functools import lru_cache  # noqa: E402

_get_settings_cached = lru_cache(maxsize=1)(_get_settings_cached)
get_settings.cache_clear = _get_settings_cached.cache_clear  # type: ignore[attr-defined]
