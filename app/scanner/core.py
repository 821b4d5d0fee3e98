"""
==============================================================================
Barcode Scanner Core Module
==============================================================================

Barcode and QR detection on still images.

Features:
---------
- zbar decoding of every supported symbology (QR, EAN, UPC, Code128, ...)
- OpenCV QR detector fallback when zbar finds nothing
- Payload classification into Wi-Fi / URL / email / contact / text codes
- Decoding off the event loop so the screen never blocks
- Visual feedback with colored bounding boxes per content type:
  - GREEN:  Wi-Fi
  - BLUE:   URL
  - ORANGE: Email
  - PURPLE: Contact
  - YELLOW: Plain text / product codes

==============================================================================
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

import cv2
import numpy as np
from pyzbar.pyzbar import decode

from app.core import exceptions

from .models import Bounds, ContentType, DetectedCode, ImageReference
from .payload_parser import PayloadParser


# Module logger
logger = logging.getLogger(__name__)


# =============================================================================
# COLOR CONSTANTS (BGR format for OpenCV)
# =============================================================================

class ScannerColors:
    """
    Color constants for detection visualization.

    All colors are in BGR format (OpenCV standard).
    """

    GREEN = (0, 255, 0)
    BLUE = (255, 128, 0)
    ORANGE = (0, 165, 255)
    PURPLE = (200, 0, 160)
    YELLOW = (0, 255, 255)

    TEXT_BLACK = (0, 0, 0)
    TEXT_WHITE = (255, 255, 255)

    BY_CONTENT_TYPE = {
        ContentType.WIFI: GREEN,
        ContentType.URL: BLUE,
        ContentType.EMAIL: ORANGE,
        ContentType.CONTACT_INFO: PURPLE,
        ContentType.TEXT: YELLOW,
    }


class BarcodeScanner:
    """
    Barcode detector for images held in the media store.

    Attributes:
        parser: PayloadParser used to type decoded values

    Example:
        >>> scanner = BarcodeScanner()
        >>> codes = await scanner.detect(image_reference)
        >>> codes[0].content_type
        <ContentType.URL: 'URL'>
    """

    def __init__(self, parser: Optional[PayloadParser] = None) -> None:
        self._parser = parser or PayloadParser()
        self._qr_detector = cv2.QRCodeDetector()
        logger.debug("Scanner created")

    # =========================================================================
    # DETECTION
    # =========================================================================

    async def detect(self, image: ImageReference) -> List[DetectedCode]:
        """
        Detect every code in the referenced image.

        Args:
            image: Current image handle

        Returns:
            Detected codes in decoder order (possibly empty)

        Raises:
            AppException: DETECTION_FAILED when the image can't be read or decoded
        """
        codes = await asyncio.to_thread(self.scan_image, image.path)
        logger.info(f"🔍 {len(codes)} code(s) detected in {image.name}")
        return codes

    def scan_image(self, image_path: Path) -> List[DetectedCode]:
        """Scan barcodes from a static image file (blocking)."""
        if not image_path.exists():
            logger.error(f"Image not found: {image_path}")
            raise exceptions.detection_failed(f"image {image_path.name} not found")

        frame = cv2.imread(str(image_path))
        if frame is None:
            logger.error(f"Could not read image: {image_path}")
            raise exceptions.detection_failed(f"unreadable image {image_path.name}")

        return self.decode_frame(frame)

    def decode_frame(self, frame: np.ndarray) -> List[DetectedCode]:
        """
        Decode an in-memory BGR frame.

        zbar runs first; the OpenCV QR detector is only consulted when zbar
        returns nothing.

        Raises:
            AppException: DETECTION_FAILED if the decoder itself errors
        """
        if frame is None or frame.size == 0:
            return []

        try:
            barcodes = decode(frame)
        except Exception as e:
            logger.error(f"Decode error: {e}")
            raise exceptions.detection_failed(str(e)) from e

        codes = []

        for barcode in barcodes:
            raw_value = barcode.data.decode("utf-8", errors="replace")
            bounds = Bounds(
                x=barcode.rect.left,
                y=barcode.rect.top,
                width=barcode.rect.width,
                height=barcode.rect.height
            )
            codes.append(self._parser.parse(raw_value, barcode.type, bounds))

        if not codes:
            codes = self._opencv_decode(frame)

        return codes

    def _opencv_decode(self, frame: np.ndarray) -> List[DetectedCode]:
        """Fallback QR decoding with OpenCV."""
        try:
            retval, decoded_info, points, _ = self._qr_detector.detectAndDecodeMulti(frame)
        except cv2.error as e:
            logger.warning(f"OpenCV QR fallback failed: {e}")
            return []

        if not retval:
            return []

        codes = []
        for index, raw_value in enumerate(decoded_info):
            if not raw_value:
                continue

            bounds = None
            if points is not None and index < len(points):
                x, y, w, h = cv2.boundingRect(points[index].astype(np.int32))
                bounds = Bounds(x=x, y=y, width=w, height=h)

            codes.append(self._parser.parse(raw_value, "QRCODE", bounds))

        return codes

    # =========================================================================
    # ANNOTATION
    # =========================================================================

    def annotate(self, frame: np.ndarray, codes: List[DetectedCode]) -> np.ndarray:
        """
        Draw a labeled box around every located code.

        Args:
            frame: BGR image (a copy is drawn on)
            codes: Codes detected in that image

        Returns:
            Annotated copy of the frame
        """
        annotated = frame.copy()

        for code in codes:
            if code.bounds is None:
                continue

            color = ScannerColors.BY_CONTENT_TYPE.get(code.content_type, ScannerColors.YELLOW)
            self._draw_colored_box(annotated, code.bounds, code.content_type.value, color)

        return annotated

    def _draw_colored_box(
        self,
        frame: np.ndarray,
        bounds: Bounds,
        label: str,
        color: tuple,
        thickness: int = 3
    ) -> None:
        """
        Draw a colored bounding box with label on the frame.

        Args:
            frame: OpenCV image to draw on
            bounds: Box to draw
            label: Text label to display
            color: BGR color tuple (e.g., ScannerColors.GREEN)
            thickness: Line thickness for the box
        """
        x, y, w, h = bounds.x, bounds.y, bounds.width, bounds.height

        cv2.rectangle(frame, (x, y), (x + w, y + h), color, thickness)

        font = cv2.FONT_HERSHEY_SIMPLEX
        font_scale = 0.6
        font_thickness = 2

        label_size, _ = cv2.getTextSize(label, font, font_scale, font_thickness)

        # Label above the box unless it would leave the image
        label_y = y - 10 if y - 10 > label_size[1] else y + h + label_size[1] + 10
        cv2.rectangle(
            frame,
            (x, label_y - label_size[1] - 5),
            (x + label_size[0] + 10, label_y + 5),
            color,
            -1
        )

        text_color = ScannerColors.TEXT_BLACK if color in (
            ScannerColors.GREEN, ScannerColors.YELLOW
        ) else ScannerColors.TEXT_WHITE
        cv2.putText(frame, label, (x + 5, label_y), font, font_scale, text_color, font_thickness)
