"""
==============================================================================
WebSocket Package
==============================================================================

Real-time WebSocket handlers.

Handlers:
---------
- notifications: Toast stream of the scan screen

==============================================================================
"""

from .notifications import router as notifications_router

__all__ = ["notifications_router"]
