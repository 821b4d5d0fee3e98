"""
Application Exception Handling

Single AppException class for all application errors with FastAPI integration.
The message of every exception is the user-visible notification text.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class AppException(Exception):
    """
    Unified application exception for all error scenarios.

    Provides consistent error response format across the entire API.

    Usage:
        raise AppException("Pick Image First", "NO_IMAGE_SELECTED", 400)
        raise AppException("Storage permission is required", "PERMISSION_DENIED", 403,
                           {"permission": "storage"})

    Error Codes:
        Permissions:
            - PERMISSION_DENIED (403)

        Acquisition:
            - ACQUISITION_CANCELLED (400)
            - INVALID_IMAGE (400)
            - IMAGE_NOT_FOUND (404)
            - STORAGE_FAILED (500)

        Scanning:
            - NO_IMAGE_SELECTED (400)
            - SCAN_IN_PROGRESS (409)
            - DETECTION_FAILED (422)

        General:
            - INTERNAL_ERROR (500)
    """

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize application exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code (e.g., "NO_IMAGE_SELECTED")
            status_code: HTTP status code (default: 400)
            details: Additional error context (optional)
        """
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        error_dict = {
            "success": False,
            "error": {
                "code": self.code,
                "message": self.message,
                "timestamp": self.timestamp
            }
        }

        if self.details:
            error_dict["error"]["details"] = self.details

        return error_dict


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    FastAPI exception handler for AppException.

    Converts AppException to consistent JSON error response.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(AppException, app_exception_handler)


# ============================================
# CONVENIENCE FACTORY FUNCTIONS
# ============================================

def permission_denied(message: str, permission: Optional[str] = None) -> AppException:
    """Create permission denied exception."""
    details = {"permission": permission} if permission else {}
    return AppException(message, "PERMISSION_DENIED", 403, details)


def acquisition_cancelled(message: str = "Cancelled.") -> AppException:
    """Create acquisition cancelled exception."""
    return AppException(message, "ACQUISITION_CANCELLED", 400)


def invalid_image(reason: str, filename: Optional[str] = None) -> AppException:
    """Create invalid image exception."""
    details = {"filename": filename} if filename else {}
    return AppException(reason, "INVALID_IMAGE", 400, details)


def image_not_found() -> AppException:
    """Create image not found exception."""
    return AppException("No image selected", "IMAGE_NOT_FOUND", 404)


def no_image_selected() -> AppException:
    """Create no image selected exception."""
    return AppException("Pick Image First", "NO_IMAGE_SELECTED", 400)


def scan_in_progress() -> AppException:
    """Create scan already running exception."""
    return AppException("Scan already in progress", "SCAN_IN_PROGRESS", 409)


def detection_failed(reason: str) -> AppException:
    """Create detection failure exception."""
    return AppException(
        f"Failure scanning due to {reason}",
        "DETECTION_FAILED",
        422,
        {"reason": reason}
    )


def storage_failed(reason: str) -> AppException:
    """Create media store write failure exception."""
    return AppException(
        "Could not save image",
        "STORAGE_FAILED",
        500,
        {"reason": reason}
    )


def internal_error(message: str = "Internal server error") -> AppException:
    """Create internal server error exception."""
    return AppException(message, "INTERNAL_ERROR", 500)
