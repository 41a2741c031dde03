"""Domain exceptions raised by the project stores and the auth gate.

Stores and the gate never raise HTTP exceptions -- routers and the
dependencies in ``deps`` translate these into status codes:

=========================  ====
InvalidProjectError        400
UnauthenticatedError       401
ForbiddenError             403
ProjectNotFoundError       404
StorageUnavailableError    500
=========================  ====
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any


class InvalidProjectError(ValueError):
    """Raised when a project payload is malformed or misses a required field."""


class ProjectNotFoundError(LookupError):
    """Raised when no project has the given id."""

    def __init__(self, project_id: int) -> None:
        super().__init__(f"Project {project_id} not found")
        self.project_id = project_id


class StorageUnavailableError(RuntimeError):
    """Raised when the backing file or table cannot be read or written."""


class UnauthenticatedError(PermissionError):
    """Raised when the bearer credential is missing or invalid."""


class ForbiddenError(PermissionError):
    """Raised when a valid credential lacks the admin role."""


def describe_validation_errors(errors: Sequence[Mapping[str, Any]]) -> str:
    """Render pydantic error dicts as ``"title: Field required; ..."``."""
    parts = []
    for error in errors:
        loc = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "path", "query"))
        parts.append(f"{loc}: {error.get('msg')}" if loc else str(error.get("msg")))
    return "; ".join(parts)
