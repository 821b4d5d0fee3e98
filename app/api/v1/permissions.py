"""
==============================================================================
Permission Endpoints
==============================================================================

Inspect and answer camera/storage permission state.

==============================================================================
"""

from fastapi import APIRouter, Depends

from app.core.dependencies import get_scan_controller
from app.schemas import PermissionsResponse
from app.services import PermissionKind, ScanController


router = APIRouter(prefix="/permissions", tags=["Permissions"])


@router.get("", response_model=PermissionsResponse)
async def list_permissions(controller: ScanController = Depends(get_scan_controller)):
    """Get the grant state of every permission."""
    return PermissionsResponse(permissions=controller.permissions.snapshot())


@router.post("/{kind}/grant", response_model=PermissionsResponse)
async def grant_permission(
    kind: PermissionKind,
    controller: ScanController = Depends(get_scan_controller)
):
    """Grant a permission (the user allowing it in the system dialog)."""
    controller.permissions.grant(kind)
    return PermissionsResponse(permissions=controller.permissions.snapshot())


@router.post("/{kind}/revoke", response_model=PermissionsResponse)
async def revoke_permission(
    kind: PermissionKind,
    controller: ScanController = Depends(get_scan_controller)
):
    """Withdraw a permission."""
    controller.permissions.revoke(kind)
    return PermissionsResponse(permissions=controller.permissions.snapshot())
