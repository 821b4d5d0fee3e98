"""
==============================================================================
Scanner Package - Barcode Detection
==============================================================================

Barcode scanning with pyzbar and OpenCV, payload typing and display text.

Classes:
--------
- BarcodeScanner: Detects codes in the current image
- PayloadParser: Types raw decoded text (Wi-Fi, URL, email, contact, text)

Functions:
----------
- format_code / format_results: Display text for detected codes

==============================================================================
"""

from .core import BarcodeScanner
from .formatter import format_code, format_results, map_encryption_type
from .models import (
    ContactCode,
    ContentType,
    DetectedCode,
    EmailCode,
    ImageReference,
    ImageSource,
    TextCode,
    UrlCode,
    WifiCode,
)
from .payload_parser import PayloadParser, parse_payload

__all__ = [
    "BarcodeScanner",
    "PayloadParser",
    "parse_payload",
    "format_code",
    "format_results",
    "map_encryption_type",
    "ContentType",
    "DetectedCode",
    "ImageReference",
    "ImageSource",
    "WifiCode",
    "UrlCode",
    "EmailCode",
    "ContactCode",
    "TextCode",
]
