"""
==============================================================================
Validation Utilities Module
==============================================================================

Validation classes for images picked from the gallery.

This module implements:
- ImageUploadValidator: Checks file name, size and image content

Validation Rules for Gallery Images:
-----------------------------------
- File extension must be in the configured list (when a name is given)
- Size: 1 byte up to the configured limit
- Bytes must decode as an image with OpenCV

==============================================================================
"""

from __future__ import annotations

from pathlib import PurePath
from typing import Iterable, Optional, Tuple

import cv2
import numpy as np


class ImageUploadValidator:
    """
    Validator for gallery image uploads.

    Example:
        >>> validator = ImageUploadValidator(["png", "jpg"], 1024 * 1024)
        >>> is_valid, extension, error = validator.validate(data, "label.PNG")
        >>> print(extension)
        'png'
    """

    DEFAULT_EXTENSION = "jpg"

    def __init__(self, extensions: Iterable[str], max_bytes: int) -> None:
        self._extensions = {ext.lower().lstrip(".") for ext in extensions}
        self._max_bytes = max_bytes

    def validate(
        self,
        data: bytes,
        filename: Optional[str] = None
    ) -> Tuple[bool, Optional[str], Optional[str]]:
        """
        Validate an uploaded image.

        Args:
            data: Raw file contents
            filename: Original file name, if known

        Returns:
            Tuple of (is_valid, extension, error_message)
            - If valid: (True, "png", None)
            - If invalid: (False, None, "Error description")
        """
        extension = self.DEFAULT_EXTENSION

        if filename:
            suffix = PurePath(filename).suffix.lower().lstrip(".")
            if suffix:
                if suffix not in self._extensions:
                    return False, None, f"Unsupported image type: .{suffix}"
                extension = suffix

        if not data:
            return False, None, "Image is empty"

        if len(data) > self._max_bytes:
            limit_mb = self._max_bytes // (1024 * 1024)
            return False, None, f"Image exceeds {limit_mb} MB"

        if self.decode(data) is None:
            return False, None, "File is not a readable image"

        return True, extension, None

    @staticmethod
    def decode(data: bytes) -> Optional[np.ndarray]:
        """Decode image bytes to a BGR array, or None."""
        buffer = np.frombuffer(data, np.uint8)
        return cv2.imdecode(buffer, cv2.IMREAD_COLOR)

    def is_valid(self, data: bytes, filename: Optional[str] = None) -> bool:
        """Quick validation check."""
        is_valid, _, _ = self.validate(data, filename)
        return is_valid
