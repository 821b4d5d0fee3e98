"""
==============================================================================
Scan Controller Module
==============================================================================

State and actions of the single scan screen.

The controller owns the only mutable state of the application:
- the current ImageReference (at most one, replaced by each new pick)
- the current result text
- the codes found by the last successful scan of the current image

Actions:
--------
    use_camera()   permission gate (camera + storage) -> camera capture
    use_gallery()  permission gate (storage)          -> gallery pick
    scan()         current image -> detector -> formatter

Every failure is published as a notification and raised as an AppException.
State is only updated after the awaited step succeeds.

==============================================================================
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from app.core import exceptions
from app.core.exceptions import AppException
from app.scanner import BarcodeScanner, DetectedCode, ImageReference, format_results

from .acquisition_service import ImageAcquisition
from .notification_service import NotificationCenter, NotificationLevel
from .permission_service import PermissionGate, RequestCode


# Module logger
logger = logging.getLogger(__name__)


CAMERA_PERMISSION_MESSAGE = "Camera and Storage permissions are required"
STORAGE_PERMISSION_MESSAGE = "Storage permission is required"


class ScanController:
    """
    Controller behind the scan screen.

    Attributes:
        _scanner: Barcode detector
        _acquisition: Camera and gallery flows
        _permissions: Permission gate
        _notifications: Toast fan-out

    Example:
        >>> controller = ScanController(scanner, acquisition, permissions, notifications)
        >>> await controller.use_gallery(data, "wifi.png")
        >>> await controller.scan()
        'TYPE_WIFI \\nssid: HomeNet ...'
    """

    def __init__(
        self,
        scanner: BarcodeScanner,
        acquisition: ImageAcquisition,
        permissions: PermissionGate,
        notifications: NotificationCenter
    ) -> None:
        self._scanner = scanner
        self._acquisition = acquisition
        self._permissions = permissions
        self._notifications = notifications

        self._image: Optional[ImageReference] = None
        self._result_text: Optional[str] = None
        self._detections: List[DetectedCode] = []
        self._scan_lock = asyncio.Lock()

    # =========================================================================
    # STATE
    # =========================================================================

    @property
    def image(self) -> Optional[ImageReference]:
        return self._image

    @property
    def result_text(self) -> Optional[str]:
        return self._result_text

    @property
    def detections(self) -> List[DetectedCode]:
        return list(self._detections)

    @property
    def permissions(self) -> PermissionGate:
        return self._permissions

    @property
    def notifications(self) -> NotificationCenter:
        return self._notifications

    @property
    def acquisition(self) -> ImageAcquisition:
        return self._acquisition

    @property
    def scanner(self) -> BarcodeScanner:
        return self._scanner

    @property
    def is_scanning(self) -> bool:
        return self._scan_lock.locked()

    # =========================================================================
    # ACTIONS
    # =========================================================================

    async def use_camera(self) -> ImageReference:
        """
        Capture a new current image with the camera.

        Raises:
            AppException: PERMISSION_DENIED, ACQUISITION_CANCELLED or STORAGE_FAILED
        """
        if not await self._permissions.request_permissions(RequestCode.CAMERA):
            raise self._fail(
                exceptions.permission_denied(CAMERA_PERMISSION_MESSAGE, "camera")
            )

        try:
            image = await self._acquisition.capture_from_camera()
        except AppException as e:
            raise self._fail(e) from e

        await self._replace_image(image)
        return image

    async def use_gallery(
        self,
        data: Optional[bytes],
        filename: Optional[str] = None
    ) -> ImageReference:
        """
        Make an uploaded gallery image the current image.

        Raises:
            AppException: PERMISSION_DENIED, ACQUISITION_CANCELLED, INVALID_IMAGE
                          or STORAGE_FAILED
        """
        if not await self._permissions.request_permissions(RequestCode.GALLERY):
            raise self._fail(
                exceptions.permission_denied(STORAGE_PERMISSION_MESSAGE, "storage")
            )

        try:
            image = await self._acquisition.pick_from_gallery(data, filename)
        except AppException as e:
            raise self._fail(e) from e

        await self._replace_image(image)
        return image

    async def scan(self) -> Optional[str]:
        """
        Detect codes in the current image and update the result text.

        The text is overwritten once per detected code, leaving the last
        one on screen. Nothing is overwritten when no code is found.

        Returns:
            Result text now on screen (None if nothing was ever found)

        Raises:
            AppException: NO_IMAGE_SELECTED, SCAN_IN_PROGRESS or DETECTION_FAILED
        """
        image = self._image
        if image is None:
            raise self._fail(exceptions.no_image_selected())

        if self._scan_lock.locked():
            raise self._fail(exceptions.scan_in_progress())

        async with self._scan_lock:
            try:
                codes = await self._scanner.detect(image)
            except AppException as e:
                raise self._fail(e) from e
            except Exception as e:
                logger.error(f"Detector error: {e}")
                raise self._fail(exceptions.detection_failed(str(e))) from e

        if self._image is image:
            self._detections = list(codes)
        self._result_text = format_results(codes, self._result_text)

        if not codes:
            logger.info(f"No code found in {image.name}")

        return self._result_text

    # =========================================================================
    # HELPERS
    # =========================================================================

    async def _replace_image(self, image: ImageReference) -> None:
        """Make image current. Detections belong to the old image; the result text stays."""
        previous = self._image
        self._image = image
        self._detections = []

        if previous is not None and previous.path != image.path:
            await self._acquisition.discard(previous)

    def _fail(self, error: AppException) -> AppException:
        """Publish a failure as a notification and hand it back for raising."""
        logger.warning(f"{error.code}: {error.message}")
        self._notifications.publish(error.message, NotificationLevel.ERROR, error.code)
        return error
