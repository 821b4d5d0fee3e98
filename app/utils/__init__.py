"""
==============================================================================
Utilities Package
==============================================================================

Utility classes and functions for the application.

Modules:
--------
- validators: Gallery image validation

==============================================================================
"""

from .validators import ImageUploadValidator

__all__ = [
    "ImageUploadValidator",
]
