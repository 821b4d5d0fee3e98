"""
==============================================================================
QR Scanner - Application Entry Point
==============================================================================

Single-screen scanner served over HTTP:
- POST actions behind the Camera, Gallery and Scan buttons
- WebSocket stream carrying the screen's toast notifications
- The screen itself as a static page at /static/index.html

Usage:
------
    # Development
    uvicorn app.main:app --reload

    # Production
    uvicorn app.main:app --host 0.0.0.0 --port 8000

==============================================================================
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path

import cv2
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles

from app.config import Settings, get_settings
from app.core.exceptions import register_exception_handlers
from app.api.router import api_router
from app.websockets import notifications_router


# ============================================================================
# LOGGING SETUP
# ============================================================================

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"
SCREEN_URL = "/static/index.html"


# ============================================================================
# APPLICATION FACTORY
# ============================================================================

class Application:
    """
    Builds the scanner app and owns its lifespan.

    The scan controller itself is created lazily by the dependency layer,
    so nothing here touches the camera.
    """

    def __init__(self, app_settings: Settings | None = None):
        self._settings = app_settings or get_settings()
        self._app = self._create_app()

    def _create_app(self) -> FastAPI:
        app = FastAPI(
            title=self._settings.app_name,
            version="1.0.0",
            description="Capture or pick an image and read its barcodes and QR codes",
            lifespan=self._lifespan,
            docs_url="/docs",
            redoc_url="/redoc",
        )

        app.add_middleware(
            CORSMiddleware,
            allow_origins=self._settings.cors_origins_list,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
        register_exception_handlers(app)

        app.include_router(api_router)
        app.include_router(notifications_router)
        app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

        @app.get("/", include_in_schema=False)
        async def root():
            """Open the scan screen."""
            return RedirectResponse(url=SCREEN_URL)

        return app

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI):
        self._on_startup()
        yield
        logger.info(f"🛑 {self._settings.app_name} stopped")

    def _on_startup(self) -> None:
        """Prepare the media store and log the scanner setup."""
        base_url = f"http://{self._settings.host}:{self._settings.port}"

        self._settings.ensure_directories()

        logger.info("=" * 60)
        logger.info(f"🚀 Starting {self._settings.app_name} ({self._settings.app_env})")
        logger.info("=" * 60)
        logger.info(f"📂 Media store: {self._settings.media_path.resolve()}")
        logger.info(
            f"📷 Camera device {self._settings.camera_index}, "
            f"{self._settings.camera_warmup_frames} warm-up frames"
        )
        logger.info(f"🔍 Decoders: zbar, OpenCV {cv2.__version__} QR fallback")
        logger.info(
            f"🔐 Auto grant: camera={self._settings.auto_grant_camera}, "
            f"storage={self._settings.auto_grant_storage}"
        )
        logger.info(f"🌐 Screen: {base_url}{SCREEN_URL}")
        logger.info(f"📖 API Docs: {base_url}/docs")
        logger.info("=" * 60)

    @property
    def app(self) -> FastAPI:
        """Get the FastAPI application instance."""
        return self._app


# ============================================================================
# APPLICATION INSTANCE
# ============================================================================

application = Application(settings)
app = application.app


# ============================================================================
# ENTRY POINT
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info"
    )
