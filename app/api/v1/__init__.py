"""
==============================================================================
API v1 Endpoints
==============================================================================

Version 1 of the REST API.

Routers:
--------
- health: Health check endpoints
- permissions: Camera and storage permission state
- images: Use camera / use gallery / current image
- scan: Scan action and screen state

==============================================================================
"""

from . import health, permissions, images, scan

__all__ = ["health", "permissions", "images", "scan"]
