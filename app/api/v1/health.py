"""
==============================================================================
Health Check Endpoints
==============================================================================

System health status endpoints for monitoring and orchestration.

==============================================================================
"""

import os

from fastapi import APIRouter, Depends

from app.core.dependencies import get_scan_controller
from app.services import ScanController


router = APIRouter(prefix="/health", tags=["Health"])


class HealthController:
    """Controller for health check operations."""

    def __init__(self, controller: ScanController):
        self._controller = controller

    def check_media_store(self) -> str:
        """Check the media directory is writable."""
        directory = self._controller.acquisition.store.directory
        if directory.is_dir() and os.access(directory, os.W_OK):
            return "healthy"
        return "unhealthy"

    def get_health(self) -> dict:
        """Get full health status."""
        media_status = self.check_media_store()
        overall = "healthy" if media_status == "healthy" else "degraded"

        return {
            "status": overall,
            "components": {
                "api": "healthy",
                "media_store": media_status,
            },
            "details": {
                "image_selected": self._controller.image is not None,
                "scanning": self._controller.is_scanning,
            }
        }


@router.get("")
async def health_check(controller: ScanController = Depends(get_scan_controller)):
    """
    Health check endpoint.

    Returns API and media store status.
    """
    return HealthController(controller).get_health()


@router.get("/ready")
async def readiness_check():
    """Readiness probe for container orchestration."""
    return {"ready": True}


@router.get("/live")
async def liveness_check():
    """Liveness probe for container orchestration."""
    return {"alive": True}
