"""
==============================================================================
Pytest Configuration and Fixtures
==============================================================================

Provides settings, test doubles, controller and client fixtures.

==============================================================================
"""

import pytest
from pathlib import Path
from typing import Generator, List, Optional

import cv2
import numpy as np
from fastapi.testclient import TestClient

from app.main import app
from app.config import Settings
from app.core.dependencies import get_scan_controller
from app.scanner import BarcodeScanner, DetectedCode, ImageReference
from app.services import (
    ImageAcquisition,
    MediaStore,
    NotificationCenter,
    PermissionGate,
    PermissionKind,
    ScanController,
)


# ============================================================================
# TEST DOUBLES
# ============================================================================

class FakeScanner(BarcodeScanner):
    """Detector returning canned codes and counting calls."""

    def __init__(self, codes: Optional[List[DetectedCode]] = None):
        super().__init__()
        self.codes = codes or []
        self.error: Optional[Exception] = None
        self.calls: List[ImageReference] = []

    async def detect(self, image: ImageReference) -> List[DetectedCode]:
        self.calls.append(image)
        if self.error is not None:
            raise self.error
        return list(self.codes)


class FakeCamera:
    """Stand-in for cv2.VideoCapture."""

    def __init__(self, frame: Optional[np.ndarray], opened: bool = True):
        self._frame = frame
        self._opened = opened
        self.reads = 0
        self.released = False

    def isOpened(self) -> bool:
        return self._opened

    def read(self):
        self.reads += 1
        if self._frame is None:
            return False, None
        return True, self._frame.copy()

    def release(self) -> None:
        self.released = True


class StaticPolicy:
    """Permission policy answering every request the same way."""

    def __init__(self, answer: bool = True):
        self.answer = answer
        self.requests: List[PermissionKind] = []

    async def __call__(self, kind: PermissionKind) -> bool:
        self.requests.append(kind)
        return self.answer


def encode_image(frame: np.ndarray, extension: str = ".png") -> bytes:
    """Encode a frame to image file bytes."""
    ok, encoded = cv2.imencode(extension, frame)
    assert ok
    return encoded.tobytes()


# ============================================================================
# SETTINGS AND SERVICES
# ============================================================================

@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings pointing the media store at a temporary directory."""
    return Settings(
        media_directory=str(tmp_path / "media"),
        camera_warmup_frames=2,
        max_upload_mb=1,
    )


@pytest.fixture
def frame() -> np.ndarray:
    """A small gray BGR image."""
    return np.full((48, 64, 3), 200, dtype=np.uint8)


@pytest.fixture
def png_bytes(frame: np.ndarray) -> bytes:
    return encode_image(frame)


@pytest.fixture
def camera(frame: np.ndarray) -> FakeCamera:
    return FakeCamera(frame)


@pytest.fixture
def acquisition(settings: Settings, camera: FakeCamera) -> ImageAcquisition:
    return ImageAcquisition(
        settings,
        MediaStore(settings.media_path),
        camera_factory=lambda index: camera,
    )


@pytest.fixture
def scanner() -> FakeScanner:
    return FakeScanner()


@pytest.fixture
def policy() -> StaticPolicy:
    return StaticPolicy(True)


@pytest.fixture
def controller(
    scanner: FakeScanner,
    acquisition: ImageAcquisition,
    policy: StaticPolicy
) -> ScanController:
    """Controller wired to test doubles."""
    return ScanController(
        scanner=scanner,
        acquisition=acquisition,
        permissions=PermissionGate(policy),
        notifications=NotificationCenter(history_size=10),
    )


# ============================================================================
# CLIENT FIXTURE
# ============================================================================

@pytest.fixture
def client(controller: ScanController) -> Generator[TestClient, None, None]:
    """Create test client with the controller override."""
    app.dependency_overrides[get_scan_controller] = lambda: controller

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
