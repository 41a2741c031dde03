"""Public project listing."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status
from loguru import logger

from portfolio.backend.deps import Store
from portfolio.backend.errors import StorageUnavailableError
from portfolio.backend.models.api import ApiResponse
from portfolio.backend.models.project import ProjectList

router = APIRouter(tags=["projects"])


@router.get("/projects", response_model=ApiResponse[ProjectList], response_model_exclude_none=True)
async def list_projects(store: Store) -> ApiResponse[ProjectList]:
    """List every project, in store order."""
    try:
        projects = await store.list_all()
    except StorageUnavailableError as e:
        logger.error("Failed to load projects: {}", e)
        raise HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to load projects") from None

    logger.debug("Loaded {} projects", len(projects))
    return ApiResponse[ProjectList](data=ProjectList(projects=projects))
