"""
==============================================================================
Schemas Package - Pydantic Models
==============================================================================

Request and response schemas using Pydantic for validation.

This package provides:
- Scan: Scan screen responses

==============================================================================
"""

from .scan import (
    ImageInfo,
    ImageResponse,
    PermissionsResponse,
    ScanResponse,
    ScreenStateResponse,
)

__all__ = [
    # Scan
    "ImageInfo",
    "ImageResponse",
    "PermissionsResponse",
    "ScanResponse",
    "ScreenStateResponse",
]
