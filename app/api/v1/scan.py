"""
==============================================================================
Scan Endpoints
==============================================================================

The "scan" action and the screen state.

==============================================================================
"""

from fastapi import APIRouter, Depends

from app.core.dependencies import get_scan_controller
from app.schemas import ImageInfo, ScanResponse, ScreenStateResponse
from app.services import ScanController


router = APIRouter(prefix="/scan", tags=["Scan"])


@router.post("", response_model=ScanResponse)
async def scan(controller: ScanController = Depends(get_scan_controller)):
    """
    Detect codes in the current image.

    Responds 400 "Pick Image First" when no image is selected.
    """
    result_text = await controller.scan()
    detections = controller.detections

    return ScanResponse(
        result_text=result_text,
        total=len(detections),
        detections=detections,
    )


@router.get("/state", response_model=ScreenStateResponse)
async def screen_state(controller: ScanController = Depends(get_scan_controller)):
    """Get everything the scan screen shows."""
    return ScreenStateResponse(
        image=ImageInfo.from_reference(controller.image),
        result_text=controller.result_text,
        detections=controller.detections,
        scanning=controller.is_scanning,
        permissions=controller.permissions.snapshot(),
        notifications=controller.notifications.recent(),
    )
