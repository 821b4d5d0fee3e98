"""
==============================================================================
Scan Schemas Module
==============================================================================

Response schemas for the scan screen endpoints.

==============================================================================
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from app.scanner.models import DetectedCode, ImageReference, ImageSource
from app.services.notification_service import Notification


class ImageInfo(BaseModel):
    """Public view of the current image."""

    name: str
    source: ImageSource
    created_at: datetime

    @classmethod
    def from_reference(cls, image: Optional[ImageReference]) -> Optional["ImageInfo"]:
        """Create from an ImageReference (None passes through)."""
        if image is None:
            return None
        return cls(name=image.name, source=image.source, created_at=image.created_at)


class ImageResponse(BaseModel):
    """Response of the camera and gallery actions."""

    success: bool = Field(default=True)
    image: ImageInfo


class ScanResponse(BaseModel):
    """
    Response of the scan action.

    ``result_text`` is what the screen shows (the last detected code);
    ``detections`` lists every code found in this scan.
    """

    success: bool = Field(default=True)
    result_text: Optional[str] = None
    total: int = Field(ge=0)
    detections: List[DetectedCode] = Field(default_factory=list)


class PermissionsResponse(BaseModel):
    """Grant state of every permission."""

    success: bool = Field(default=True)
    permissions: Dict[str, bool]


class ScreenStateResponse(BaseModel):
    """Everything the scan screen displays."""

    success: bool = Field(default=True)
    image: Optional[ImageInfo] = None
    result_text: Optional[str] = None
    detections: List[DetectedCode] = Field(default_factory=list)
    scanning: bool = False
    permissions: Dict[str, bool] = Field(default_factory=dict)
    notifications: List[Notification] = Field(default_factory=list)
