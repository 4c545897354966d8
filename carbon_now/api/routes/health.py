"""
Health Routes
=============

FastAPI routes for health check endpoints.
"""

from fastapi import APIRouter, Depends

from carbon_now.api.dependencies import get_current_settings
from carbon_now.config.settings import Settings
from carbon_now.core.rendering.workspace import count_workspaces
from carbon_now.models.schemas import HealthStatus

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthStatus)
async def health_check(settings: Settings = Depends(get_current_settings)) -> HealthStatus:
    """Basic health check; reports how many request workspaces are on disk."""
    return HealthStatus(
        status="healthy",
        version=settings.app_version,
        workspace_root=str(settings.workspace_root),
        active_workspaces=count_workspaces(settings.workspace_root),
    )
