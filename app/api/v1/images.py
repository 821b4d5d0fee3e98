"""
==============================================================================
Image Endpoints
==============================================================================

The "use camera" and "use gallery" actions, and the current image preview.

==============================================================================
"""

import asyncio
from typing import Optional

import cv2
from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.responses import FileResponse, Response

from app.core import exceptions
from app.core.dependencies import get_scan_controller
from app.schemas import ImageInfo, ImageResponse
from app.services import ScanController


router = APIRouter(prefix="/images", tags=["Images"])


class ImageController:
    """Controller for image acquisition and preview."""

    def __init__(self, controller: ScanController):
        self._controller = controller

    async def use_camera(self) -> ImageResponse:
        image = await self._controller.use_camera()
        return ImageResponse(image=ImageInfo.from_reference(image))

    async def use_gallery(self, file: Optional[UploadFile]) -> ImageResponse:
        data = await file.read() if file is not None else None
        filename = file.filename if file is not None else None

        image = await self._controller.use_gallery(data, filename)
        return ImageResponse(image=ImageInfo.from_reference(image))

    async def current(self, annotated: bool) -> Response:
        """Serve the current image, optionally with detection boxes."""
        image = self._controller.image
        if image is None or not image.path.exists():
            raise exceptions.image_not_found()

        if not annotated:
            return FileResponse(image.path)

        frame = await asyncio.to_thread(self._controller.acquisition.store.load, image)
        if frame is None:
            raise exceptions.image_not_found()

        drawn = self._controller.scanner.annotate(frame, self._controller.detections)
        ok, encoded = cv2.imencode(".jpg", drawn)
        if not ok:
            raise exceptions.internal_error("Could not encode annotated image")

        return Response(content=encoded.tobytes(), media_type="image/jpeg")


@router.post("/camera", response_model=ImageResponse)
async def use_camera(controller: ScanController = Depends(get_scan_controller)):
    """Capture the current image with the camera."""
    return await ImageController(controller).use_camera()


@router.post("/gallery", response_model=ImageResponse)
async def use_gallery(
    file: Optional[UploadFile] = File(None),
    controller: ScanController = Depends(get_scan_controller)
):
    """Make an uploaded image the current image."""
    return await ImageController(controller).use_gallery(file)


@router.get("/current")
async def current_image(
    annotated: bool = Query(False),
    controller: ScanController = Depends(get_scan_controller)
):
    """Get the current image, with detection boxes when annotated=true."""
    return await ImageController(controller).current(annotated)
