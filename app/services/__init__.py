"""
==============================================================================
Services Package - Application Logic Layer
==============================================================================

Service classes behind the scan screen.

This package provides:
- PermissionGate: Camera and storage permission requests
- ImageAcquisition / MediaStore: Camera capture and gallery picks
- NotificationCenter: User-visible toasts
- ScanController: Screen state and the three user actions

Architecture:
------------
    ┌─────────────────┐
    │   API Router    │
    └────────┬────────┘
             │
    ┌────────▼────────┐
    │ ScanController  │  ← Screen state
    └────────┬────────┘
             │
    ┌────────▼────────────────────────────────┐
    │ PermissionGate / ImageAcquisition /     │
    │ BarcodeScanner / NotificationCenter     │
    └─────────────────────────────────────────┘

==============================================================================
"""

from .acquisition_service import ImageAcquisition, MediaStore
from .notification_service import Notification, NotificationCenter, NotificationLevel
from .permission_service import (
    PermissionGate,
    PermissionKind,
    RequestCode,
    SettingsPermissionPolicy,
)
from .scan_controller import ScanController

__all__ = [
    "ImageAcquisition",
    "MediaStore",
    "Notification",
    "NotificationCenter",
    "NotificationLevel",
    "PermissionGate",
    "PermissionKind",
    "RequestCode",
    "SettingsPermissionPolicy",
    "ScanController",
]
