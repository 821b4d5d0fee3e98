"""
==============================================================================
Scanner Models Module
==============================================================================

Pydantic models for decoded barcodes and the current image handle.

DetectedCode is a closed tagged union discriminated by ``content_type``:

    WifiCode | UrlCode | EmailCode | ContactCode | TextCode

==============================================================================
"""

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ContentType(str, Enum):
    """Semantic classification of a decoded payload."""

    WIFI = "WIFI"
    URL = "URL"
    EMAIL = "EMAIL"
    CONTACT_INFO = "CONTACT_INFO"
    TEXT = "TEXT"


class ImageSource(str, Enum):
    """Where the current image came from."""

    CAMERA = "camera"
    GALLERY = "gallery"


class Bounds(BaseModel):
    """Bounding rectangle of a code inside the scanned image."""

    model_config = ConfigDict(frozen=True)

    x: int
    y: int
    width: int = Field(ge=0)
    height: int = Field(ge=0)


# =============================================================================
# PAYLOADS
# =============================================================================

class WifiPayload(BaseModel):
    """
    Wi-Fi network credentials.

    Attributes:
        ssid: Network name
        password: Network password
        encryption_type: 1 = open, 2 = WPA, 3 = WEP, anything else unknown
    """

    model_config = ConfigDict(frozen=True)

    ssid: Optional[str] = None
    password: Optional[str] = None
    encryption_type: Optional[int] = None


class UrlPayload(BaseModel):
    """Bookmark with an optional title."""

    model_config = ConfigDict(frozen=True)

    title: Optional[str] = None
    url: Optional[str] = None


class EmailPayload(BaseModel):
    """Email message draft."""

    model_config = ConfigDict(frozen=True)

    address: Optional[str] = None
    subject: Optional[str] = None
    body: Optional[str] = None


class ContactPayload(BaseModel):
    """
    Contact card.

    Phones and emails keep the order they had in the card.
    """

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    organization: Optional[str] = None
    title: Optional[str] = None
    phones: List[str] = Field(default_factory=list)
    emails: List[str] = Field(default_factory=list)


# =============================================================================
# DETECTED CODE VARIANTS
# =============================================================================

class _BaseCode(BaseModel):
    """Fields shared by every detected code."""

    model_config = ConfigDict(frozen=True)

    raw_value: Optional[str] = None
    format: Optional[str] = Field(default=None, description="Symbology, e.g. QRCODE")
    bounds: Optional[Bounds] = None


class WifiCode(_BaseCode):
    content_type: Literal[ContentType.WIFI] = ContentType.WIFI
    wifi: WifiPayload


class UrlCode(_BaseCode):
    content_type: Literal[ContentType.URL] = ContentType.URL
    url: UrlPayload


class EmailCode(_BaseCode):
    content_type: Literal[ContentType.EMAIL] = ContentType.EMAIL
    email: EmailPayload


class ContactCode(_BaseCode):
    content_type: Literal[ContentType.CONTACT_INFO] = ContentType.CONTACT_INFO
    contact: ContactPayload


class TextCode(_BaseCode):
    content_type: Literal[ContentType.TEXT] = ContentType.TEXT


DetectedCode = Annotated[
    Union[WifiCode, UrlCode, EmailCode, ContactCode, TextCode],
    Field(discriminator="content_type"),
]


# =============================================================================
# IMAGE REFERENCE
# =============================================================================

class ImageReference(BaseModel):
    """
    Handle to the image currently selected for scanning.

    Attributes:
        path: File inside the media store
        source: Camera capture or gallery pick
        created_at: When the image entered the media store
    """

    model_config = ConfigDict(frozen=True)

    path: Path
    source: ImageSource
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def name(self) -> str:
        """File name inside the media store."""
        return self.path.name
