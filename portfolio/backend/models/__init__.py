"""Data models for the portfolio backend."""

from portfolio.backend.models.api import (
    AdminStatus,
    ApiResponse,
    ErrorResponse,
    LoginRequest,
    LoginResponse,
    Principal,
    SupabasePublicConfig,
)
from portfolio.backend.models.project import Project, ProjectCreate, ProjectList, ProjectUpdate

__all__ = [
    # API schemas
    "AdminStatus",
    "ApiResponse",
    "ErrorResponse",
    "LoginRequest",
    "LoginResponse",
    "Principal",
    # Projects
    "Project",
    "ProjectCreate",
    "ProjectList",
    "ProjectUpdate",
    "SupabasePublicConfig",
]
