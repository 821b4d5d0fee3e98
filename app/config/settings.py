"""
==============================================================================
Application Settings Module
==============================================================================

Configuration management for the QR scanner service using Pydantic Settings.

A single cached Settings instance is shared by the whole application.

Configuration Priority (highest to lowest):
------------------------------------------
1. Environment variables
2. .env file
3. Default values

==============================================================================
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Module logger
logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        app_name: Display name for the application
        app_env: Environment mode (development/staging/production)
        debug: Enable debug mode for verbose logging
        host: Server bind address
        port: Server port number
        camera_index: OpenCV video device used for "use camera"
        camera_warmup_frames: Frames discarded before the captured one
        media_directory: Where captured and picked images are stored
        allowed_image_extensions: Comma separated gallery file extensions
        max_upload_mb: Largest accepted gallery upload
        auto_grant_camera: Grant camera permission when requested
        auto_grant_storage: Grant storage permission when requested
        keep_replaced_images: Keep media files after a newer image replaces them
        notification_history_size: Toasts kept for late subscribers
        cors_origins: Allowed CORS origins (JSON array string)

    Example:
        >>> settings = Settings()
        >>> settings.camera_index
        0
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
    )

    # =========================================================================
    # APPLICATION SETTINGS
    # =========================================================================
    app_name: str = Field(
        default="QR Scanner",
        description="Display name for the application"
    )

    app_env: str = Field(
        default="development",
        description="Environment mode: development, staging, production"
    )

    debug: bool = Field(
        default=False,
        description="Enable debug mode for verbose logging"
    )

    # =========================================================================
    # SERVER SETTINGS
    # =========================================================================
    host: str = Field(
        default="0.0.0.0",
        description="Server bind address"
    )

    port: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Server port number"
    )

    # =========================================================================
    # ACQUISITION SETTINGS
    # =========================================================================
    camera_index: int = Field(
        default=0,
        ge=0,
        description="OpenCV camera device index"
    )

    camera_warmup_frames: int = Field(
        default=5,
        ge=0,
        le=60,  # Auto exposure settles well within two seconds
        description="Frames read and discarded before capturing"
    )

    media_directory: str = Field(
        default="storage/media",
        description="Directory acting as the media store"
    )

    allowed_image_extensions: str = Field(
        default="jpg,jpeg,png,bmp,webp,tif,tiff",
        description="Comma separated list of accepted gallery extensions"
    )

    max_upload_mb: int = Field(
        default=20,
        ge=1,
        le=200,
        description="Maximum gallery upload size in megabytes"
    )

    keep_replaced_images: bool = Field(
        default=False,
        description="Keep an image file once a newer capture or pick replaces it"
    )

    # =========================================================================
    # PERMISSION SETTINGS
    # =========================================================================
    auto_grant_camera: bool = Field(
        default=True,
        description="Answer camera permission requests with a grant"
    )

    auto_grant_storage: bool = Field(
        default=True,
        description="Answer storage permission requests with a grant"
    )

    # =========================================================================
    # NOTIFICATION SETTINGS
    # =========================================================================
    notification_history_size: int = Field(
        default=20,
        ge=1,
        le=500,
        description="Number of recent notifications kept in memory"
    )

    # =========================================================================
    # CORS SETTINGS
    # =========================================================================
    cors_origins: str = Field(
        default='["*"]',
        description="Allowed CORS origins as JSON array string"
    )

    # =========================================================================
    # VALIDATORS
    # =========================================================================
    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, value: str) -> str:
        """
        Validate and normalize application environment.

        Unknown values fall back to 'development'.
        """
        valid_envs = {"development", "staging", "production"}
        normalized = value.lower().strip()

        if normalized not in valid_envs:
            logger.warning(
                f"Unknown environment '{value}', defaulting to 'development'"
            )
            return "development"

        return normalized

    @field_validator("allowed_image_extensions")
    @classmethod
    def validate_extensions(cls, value: str) -> str:
        """
        Normalize the extension list to lowercase names without dots.

        Raises:
            ValueError: If the list is empty
        """
        extensions = [
            ext.strip().lower().lstrip(".")
            for ext in value.split(",")
            if ext.strip().strip(".")
        ]

        if not extensions:
            raise ValueError("allowed_image_extensions must not be empty")

        return ",".join(extensions)

    # =========================================================================
    # COMPUTED PROPERTIES
    # =========================================================================
    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"

    @property
    def media_path(self) -> Path:
        """Get media directory as Path object."""
        return Path(self.media_directory)

    @property
    def image_extensions(self) -> List[str]:
        """Accepted gallery extensions as a list."""
        return self.allowed_image_extensions.split(",")

    @property
    def max_upload_bytes(self) -> int:
        """Get upload limit in bytes."""
        return self.max_upload_mb * 1024 * 1024

    @property
    def cors_origins_list(self) -> List[str]:
        """
        Parse CORS origins from JSON string to list.

        Returns:
            List of allowed origin strings
        """
        try:
            origins = json.loads(self.cors_origins)
            if isinstance(origins, list):
                return origins
            return ["*"]
        except json.JSONDecodeError:
            logger.warning(
                f"Invalid CORS origins JSON: {self.cors_origins}, "
                "defaulting to ['*']"
            )
            return ["*"]

    # =========================================================================
    # UTILITY METHODS
    # =========================================================================
    def ensure_directories(self) -> None:
        """Create the media directory if it doesn't exist."""
        self.media_path.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Media directory ready: {self.media_path}")

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"Settings(app_name={self.app_name!r}, "
            f"app_env={self.app_env!r}, "
            f"camera_index={self.camera_index}, "
            f"media_directory={self.media_directory!r})"
        )


# =============================================================================
# SINGLETON INSTANCE MANAGEMENT
# =============================================================================

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get the global Settings instance.

    Returns:
        Global Settings instance
    """
    settings = Settings()
    settings.ensure_directories()

    if settings.debug:
        logger.info(f"Configuration loaded: {settings}")

    return settings
