"""
==============================================================================
Barcode Scanner Tests
==============================================================================

Decoding with zbar / OpenCV on generated images.

==============================================================================
"""

import asyncio

import cv2
import numpy as np
import pytest

from app.core.exceptions import AppException
from app.scanner import BarcodeScanner, ContentType
from app.scanner.models import Bounds, ImageReference, ImageSource, TextCode


def make_qr(text: str) -> np.ndarray:
    """Render a QR code as a BGR image with a quiet zone."""
    encoder = cv2.QRCodeEncoder.create()
    modules = encoder.encode(text)
    modules = cv2.copyMakeBorder(modules, 4, 4, 4, 4, cv2.BORDER_CONSTANT, value=255)
    scaled = cv2.resize(
        modules,
        (modules.shape[1] * 8, modules.shape[0] * 8),
        interpolation=cv2.INTER_NEAREST
    )
    return cv2.cvtColor(scaled, cv2.COLOR_GRAY2BGR)


@pytest.fixture
def scanner() -> BarcodeScanner:
    return BarcodeScanner()


class TestDecodeFrame:
    """Tests for in-memory decoding."""

    def test_blank_frame_has_no_codes(self, scanner, frame):
        assert scanner.decode_frame(frame) == []

    def test_empty_frame(self, scanner):
        assert scanner.decode_frame(np.zeros((0, 0, 3), dtype=np.uint8)) == []

    @pytest.mark.skipif(not hasattr(cv2, "QRCodeEncoder"), reason="OpenCV without QR encoder")
    def test_wifi_qr_code(self, scanner):
        codes = scanner.decode_frame(make_qr("WIFI:T:WPA;S:HomeNet;P:secret1;;"))

        assert len(codes) == 1
        assert codes[0].content_type == ContentType.WIFI
        assert codes[0].wifi.ssid == "HomeNet"
        assert codes[0].bounds is not None


class TestDetect:
    """Tests for detection on stored images."""

    def test_missing_file_is_detection_failure(self, scanner, tmp_path):
        image = ImageReference(path=tmp_path / "gone.png", source=ImageSource.GALLERY)

        with pytest.raises(AppException) as info:
            asyncio.run(scanner.detect(image))

        assert info.value.code == "DETECTION_FAILED"

    def test_unreadable_file_is_detection_failure(self, scanner, tmp_path):
        path = tmp_path / "broken.png"
        path.write_bytes(b"garbage")
        image = ImageReference(path=path, source=ImageSource.GALLERY)

        with pytest.raises(AppException) as info:
            asyncio.run(scanner.detect(image))

        assert info.value.message.startswith("Failure scanning due to")

    @pytest.mark.skipif(not hasattr(cv2, "QRCodeEncoder"), reason="OpenCV without QR encoder")
    def test_detect_url_from_file(self, scanner, tmp_path):
        path = tmp_path / "url.png"
        cv2.imwrite(str(path), make_qr("https://example.com"))
        image = ImageReference(path=path, source=ImageSource.CAMERA)

        codes = asyncio.run(scanner.detect(image))

        assert [code.content_type for code in codes] == [ContentType.URL]
        assert codes[0].url.url == "https://example.com"


def test_annotate_leaves_original_untouched(scanner, frame):
    code = TextCode(raw_value="x", bounds=Bounds(x=5, y=20, width=20, height=10))

    annotated = scanner.annotate(frame, [code])

    assert annotated.shape == frame.shape
    assert not np.array_equal(annotated, frame)
    assert np.all(frame == 200)
