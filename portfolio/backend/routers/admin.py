"""Admin project CRUD endpoints.

Every route on this router passes through ``require_admin`` first, so an
unauthenticated request is rejected before the store is touched.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status
from loguru import logger
from pydantic import TypeAdapter, ValidationError

from portfolio.backend.deps import AdminPrincipal, Store, require_admin
from portfolio.backend.errors import (
    InvalidProjectError,
    ProjectNotFoundError,
    StorageUnavailableError,
    describe_validation_errors,
)
from portfolio.backend.models.api import ApiResponse, Principal
from portfolio.backend.models.project import Project, ProjectCreate, ProjectList, ProjectUpdate

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])

_project_list = TypeAdapter(list[ProjectCreate])


def parse_project_list(payload: Any) -> list[ProjectCreate]:
    """Accept ``[...]`` or ``{"projects": [...]}``.  Raises ``InvalidProjectError``."""
    if isinstance(payload, dict) and "projects" in payload:
        payload = payload["projects"]
    if not isinstance(payload, list):
        msg = 'Expected an array of projects or {"projects": [...]}'
        raise InvalidProjectError(msg)
    try:
        return _project_list.validate_python(payload)
    except ValidationError as e:
        raise InvalidProjectError(describe_validation_errors(e.errors())) from None


@router.get("/me", response_model=ApiResponse[Principal], response_model_exclude_none=True)
async def whoami(principal: AdminPrincipal) -> ApiResponse[Principal]:
    """Return the authenticated principal (no data for the shared secret)."""
    if principal is None:
        return ApiResponse[Principal](message="Authenticated with shared token")
    return ApiResponse[Principal](data=principal)


@router.put("/projects", response_model=ApiResponse[ProjectList], response_model_exclude_none=True)
async def replace_projects(store: Store, payload: Any = Body(...)) -> ApiResponse[ProjectList]:
    """Replace the whole project collection."""
    try:
        stored = await store.replace_all(parse_project_list(payload))
    except InvalidProjectError as e:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail=str(e)) from None
    except StorageUnavailableError as e:
        logger.error("Failed to replace projects: {}", e)
        raise HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to save projects") from None

    return ApiResponse[ProjectList](
        data=ProjectList(projects=stored),
        message=f"Saved {len(stored)} projects",
    )


@router.post("/project", response_model=ApiResponse[Project], response_model_exclude_none=True)
async def create_project(body: ProjectCreate, store: Store) -> ApiResponse[Project]:
    """Add one project.  The id is assigned by the store when omitted."""
    try:
        project = await store.insert(body)
    except InvalidProjectError as e:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail=str(e)) from None
    except StorageUnavailableError as e:
        logger.error("Failed to insert project: {}", e)
        raise HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to save project") from None

    logger.info("Created project {} ({!r})", project.id, project.title)
    return ApiResponse[Project](data=project, message="Project created")


@router.put("/project/{project_id}", response_model=ApiResponse[Project], response_model_exclude_none=True)
async def update_project(project_id: int, body: ProjectUpdate, store: Store) -> ApiResponse[Project]:
    """Partially update a project."""
    try:
        project = await store.update(project_id, body)
    except ProjectNotFoundError:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Project not found") from None
    except InvalidProjectError as e:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail=str(e)) from None
    except StorageUnavailableError as e:
        logger.error("Failed to update project {}: {}", project_id, e)
        raise HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to save project") from None

    logger.info("Updated project {}", project_id)
    return ApiResponse[Project](data=project, message="Project updated")


@router.delete("/project/{project_id}", response_model=ApiResponse[Project], response_model_exclude_none=True)
async def delete_project(project_id: int, store: Store) -> ApiResponse[Project]:
    """Delete a project and return it."""
    try:
        project = await store.delete(project_id)
    except ProjectNotFoundError:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Project not found") from None
    except StorageUnavailableError as e:
        logger.error("Failed to delete project {}: {}", project_id, e)
        raise HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to delete project") from None

    logger.info("Deleted project {}", project_id)
    return ApiResponse[Project](data=project, message="Project deleted")
