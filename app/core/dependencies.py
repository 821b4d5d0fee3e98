"""
==============================================================================
FastAPI Dependencies Module
==============================================================================

Dependency injection for the single scan controller.

The screen has exactly one controller per process, built lazily from the
settings and shared by every HTTP and WebSocket handler.

Usage:
------
    @router.post("/scan")
    async def scan(controller: ScanController = Depends(get_scan_controller)):
        ...

Tests replace it through ``app.dependency_overrides[get_scan_controller]``.

==============================================================================
"""

from __future__ import annotations

import logging
from functools import lru_cache

from app.config import get_settings
from app.scanner import BarcodeScanner
from app.services import (
    ImageAcquisition,
    NotificationCenter,
    PermissionGate,
    ScanController,
    SettingsPermissionPolicy,
)


# Module logger
logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_scan_controller() -> ScanController:
    """
    Get the process-wide ScanController.

    Returns:
        Controller wired to the real camera, media store and detector
    """
    settings = get_settings()

    controller = ScanController(
        scanner=BarcodeScanner(),
        acquisition=ImageAcquisition(settings),
        permissions=PermissionGate(SettingsPermissionPolicy(settings)),
        notifications=NotificationCenter(settings.notification_history_size),
    )

    logger.debug("Scan controller created")
    return controller
