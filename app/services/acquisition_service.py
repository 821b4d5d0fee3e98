"""
==============================================================================
Acquisition Service Module
==============================================================================

Obtains the image to scan, either from the camera or from the gallery.

This module implements:
- MediaStore: Directory holding captured and picked images
- ImageAcquisition: Camera capture and gallery pick flows

Cancellation:
------------
A camera that can't be opened or yields no frame, and a gallery pick without
a file, are cancellations. They raise ACQUISITION_CANCELLED and produce no
ImageReference, so the caller keeps whatever image it had before.

==============================================================================
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional

import cv2
import numpy as np

from app.config import Settings, get_settings
from app.core import exceptions
from app.scanner.models import ImageReference, ImageSource
from app.utils.validators import ImageUploadValidator


# Module logger
logger = logging.getLogger(__name__)


CAMERA_CANCELLED_MESSAGE = "Camera capture canceled."
GALLERY_CANCELLED_MESSAGE = "Cancelled."


class MediaStore:
    """
    Flat directory of images, one file per capture or pick.

    File names: {source}_{YYYYmmdd-HHMMSS}_{random}.{ext}
    """

    def __init__(self, directory: Path) -> None:
        self._directory = Path(directory)
        self._directory.mkdir(parents=True, exist_ok=True)

    @property
    def directory(self) -> Path:
        return self._directory

    def _new_path(self, source: ImageSource, extension: str) -> Path:
        stamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
        return self._directory / f"{source.value}_{stamp}_{uuid.uuid4().hex[:8]}.{extension}"

    def insert_bytes(self, data: bytes, extension: str, source: ImageSource) -> ImageReference:
        """Store encoded image bytes as a new file."""
        path = self._new_path(source, extension)
        path.write_bytes(data)
        logger.debug(f"Stored {len(data)} bytes at {path}")
        return ImageReference(path=path, source=source)

    def insert_frame(self, frame: np.ndarray, source: ImageSource) -> ImageReference:
        """Encode a BGR frame as JPEG and store it."""
        path = self._new_path(source, "jpg")
        if not cv2.imwrite(str(path), frame):
            raise OSError(f"Could not write image to {path}")
        logger.debug(f"Stored frame at {path}")
        return ImageReference(path=path, source=source)

    def load(self, image: ImageReference) -> Optional[np.ndarray]:
        """Read a stored image back as a BGR array."""
        return cv2.imread(str(image.path))

    def delete(self, image: ImageReference) -> bool:
        """Remove a stored image. Files outside the store are left alone."""
        path = Path(image.path)
        if path.parent.resolve() != self._directory.resolve():
            return False

        try:
            path.unlink()
        except FileNotFoundError:
            return False

        logger.debug(f"Deleted {path}")
        return True


class ImageAcquisition:
    """
    Camera and gallery flows producing ImageReferences.

    Attributes:
        _settings: Application settings
        _store: MediaStore receiving every image
        _camera_factory: Callable opening a video device (cv2.VideoCapture)

    Example:
        >>> acquisition = ImageAcquisition()
        >>> image = await acquisition.pick_from_gallery(data, "label.png")
        >>> image.source
        <ImageSource.GALLERY: 'gallery'>
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        store: Optional[MediaStore] = None,
        camera_factory: Callable[[int], Any] = cv2.VideoCapture
    ) -> None:
        self._settings = settings or get_settings()
        self._store = store or MediaStore(self._settings.media_path)
        self._camera_factory = camera_factory
        self._validator = ImageUploadValidator(
            self._settings.image_extensions,
            self._settings.max_upload_bytes
        )

    @property
    def store(self) -> MediaStore:
        return self._store

    # =========================================================================
    # CAMERA
    # =========================================================================

    async def capture_from_camera(self) -> ImageReference:
        """
        Capture one frame from the configured camera.

        Raises:
            AppException: ACQUISITION_CANCELLED when no frame could be taken,
                          STORAGE_FAILED when the frame could not be saved
        """
        frame = await asyncio.to_thread(self._grab_frame)

        if frame is None:
            raise exceptions.acquisition_cancelled(CAMERA_CANCELLED_MESSAGE)

        image = await self._store_image(self._store.insert_frame, frame, ImageSource.CAMERA)
        logger.info(f"📷 Captured {image.name}")
        return image

    def _grab_frame(self) -> Optional[np.ndarray]:
        """Open the camera, let exposure settle, read one frame."""
        index = self._settings.camera_index
        cap = self._camera_factory(index)

        try:
            if not cap.isOpened():
                logger.error(f"Cannot open camera {index}")
                return None

            for _ in range(self._settings.camera_warmup_frames):
                cap.read()

            ret, frame = cap.read()
            if not ret or frame is None:
                logger.warning("Failed to read frame")
                return None

            return frame
        finally:
            cap.release()

    # =========================================================================
    # GALLERY
    # =========================================================================

    async def pick_from_gallery(
        self,
        data: Optional[bytes],
        filename: Optional[str] = None
    ) -> ImageReference:
        """
        Store an image chosen by the user.

        Args:
            data: File contents (None or empty when the user backed out)
            filename: Original file name

        Raises:
            AppException: ACQUISITION_CANCELLED without data,
                          INVALID_IMAGE for unsupported or unreadable files
                          STORAGE_FAILED when the file could not be saved
        """
        if not data:
            raise exceptions.acquisition_cancelled(GALLERY_CANCELLED_MESSAGE)

        is_valid, extension, error = await asyncio.to_thread(
            self._validator.validate, data, filename
        )
        if not is_valid:
            logger.warning(f"Rejected gallery image {filename!r}: {error}")
            raise exceptions.invalid_image(error, filename)

        image = await self._store_image(
            self._store.insert_bytes, data, extension, ImageSource.GALLERY
        )
        logger.info(f"🖼️ Picked {filename or image.name} from gallery")
        return image

    # =========================================================================
    # MEDIA STORE
    # =========================================================================

    async def _store_image(self, insert: Callable[..., ImageReference], *args: Any) -> ImageReference:
        try:
            return await asyncio.to_thread(insert, *args)
        except OSError as e:
            logger.error(f"❌ Media store write failed: {e}")
            raise exceptions.storage_failed(str(e)) from e

    async def discard(self, image: Optional[ImageReference]) -> None:
        """
        Delete an image that is no longer current.

        Nothing is deleted when keep_replaced_images is set.
        """
        if image is None or self._settings.keep_replaced_images:
            return

        try:
            if await asyncio.to_thread(self._store.delete, image):
                logger.info(f"🗑️ Removed replaced image {image.name}")
        except OSError as e:
            logger.warning(f"⚠️ Could not remove {image.name}: {e}")
