"""
==============================================================================
Permission Service Module
==============================================================================

Permission gate in front of image acquisition.

This module implements:
- PermissionKind: camera and storage permissions
- RequestCode: request identifiers grouping the permissions one action needs
- SettingsPermissionPolicy: answers requests from configuration
- PermissionGate: remembers grants and resolves requests

Request Identifiers:
-------------------
    CAMERA  (100) -> camera + storage
    GALLERY (101) -> storage

==============================================================================
"""

from __future__ import annotations

import logging
import os
from enum import Enum, IntEnum
from typing import Awaitable, Callable, Dict, Iterable, Optional, Set, Tuple

from app.config import Settings, get_settings


# Module logger
logger = logging.getLogger(__name__)


class PermissionKind(str, Enum):
    """Permissions the scanner can ask for."""

    CAMERA = "camera"
    STORAGE = "storage"


class RequestCode(IntEnum):
    """Identifiers of permission requests."""

    CAMERA = 100
    GALLERY = 101


REQUESTED_PERMISSIONS: Dict[RequestCode, Tuple[PermissionKind, ...]] = {
    RequestCode.CAMERA: (PermissionKind.CAMERA, PermissionKind.STORAGE),
    RequestCode.GALLERY: (PermissionKind.STORAGE,),
}


PermissionPolicy = Callable[[PermissionKind], Awaitable[bool]]


class SettingsPermissionPolicy:
    """
    Default answer to permission requests.

    Camera requests follow ``auto_grant_camera``. Storage requests follow
    ``auto_grant_storage`` and are denied when the media directory is not
    writable.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()

    async def __call__(self, kind: PermissionKind) -> bool:
        if kind == PermissionKind.CAMERA:
            return self._settings.auto_grant_camera

        if not self._settings.auto_grant_storage:
            return False

        media_path = self._settings.media_path
        return media_path.is_dir() and os.access(media_path, os.W_OK)


class PermissionGate:
    """
    Tracks granted permissions and resolves new requests.

    Example:
        >>> gate = PermissionGate()
        >>> gate.has_permission(PermissionKind.CAMERA)
        False
        >>> await gate.request_permissions(RequestCode.CAMERA)
        True
    """

    def __init__(
        self,
        policy: Optional[PermissionPolicy] = None,
        granted: Iterable[PermissionKind] = ()
    ) -> None:
        """
        Initialize the gate.

        Args:
            policy: Coroutine answering a single permission request
            granted: Permissions already granted
        """
        self._policy = policy or SettingsPermissionPolicy()
        self._granted: Set[PermissionKind] = set(granted)

    def has_permission(self, kind: PermissionKind) -> bool:
        """Check whether a permission is currently granted."""
        return kind in self._granted

    async def request_permission(self, kind: PermissionKind) -> bool:
        """
        Request one permission.

        Returns:
            True if granted (now or earlier)
        """
        if self.has_permission(kind):
            return True

        granted = bool(await self._policy(kind))

        if granted:
            self._granted.add(kind)
            logger.info(f"✅ Permission granted: {kind.value}")
        else:
            logger.warning(f"⛔ Permission denied: {kind.value}")

        return granted

    async def request_permissions(self, request_code: RequestCode) -> bool:
        """
        Request every permission a request identifier covers.

        Stops at the first denial.

        Returns:
            True if all permissions are granted
        """
        for kind in REQUESTED_PERMISSIONS[request_code]:
            if not await self.request_permission(kind):
                return False
        return True

    def grant(self, kind: PermissionKind) -> None:
        """Record a grant made by the user."""
        self._granted.add(kind)
        logger.info(f"✅ Permission granted by user: {kind.value}")

    def revoke(self, kind: PermissionKind) -> None:
        """Withdraw a previously granted permission."""
        self._granted.discard(kind)
        logger.info(f"🔒 Permission revoked: {kind.value}")

    def snapshot(self) -> Dict[str, bool]:
        """Grant state of every permission kind."""
        return {kind.value: self.has_permission(kind) for kind in PermissionKind}
