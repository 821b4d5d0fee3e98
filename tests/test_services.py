"""
==============================================================================
Service Tests
==============================================================================

Permission gate, media store, acquisition and notifications.

==============================================================================
"""

import asyncio

import pytest

from app.config import Settings
from app.core.exceptions import AppException
from app.scanner.models import ImageReference, ImageSource
from app.services import (
    MediaStore,
    NotificationCenter,
    NotificationLevel,
    PermissionGate,
    PermissionKind,
    RequestCode,
    SettingsPermissionPolicy,
)
from app.utils import ImageUploadValidator

from conftest import FakeCamera, StaticPolicy


def run(coro):
    return asyncio.run(coro)


class TestPermissionGate:
    """Tests for permission requests."""

    def test_nothing_granted_initially(self):
        gate = PermissionGate(StaticPolicy(True))
        assert not gate.has_permission(PermissionKind.CAMERA)
        assert gate.snapshot() == {"camera": False, "storage": False}

    def test_camera_request_covers_storage(self):
        policy = StaticPolicy(True)
        gate = PermissionGate(policy)

        assert run(gate.request_permissions(RequestCode.CAMERA)) is True
        assert policy.requests == [PermissionKind.CAMERA, PermissionKind.STORAGE]
        assert gate.snapshot() == {"camera": True, "storage": True}

    def test_denial_stops_request(self):
        policy = StaticPolicy(False)
        gate = PermissionGate(policy)

        assert run(gate.request_permissions(RequestCode.CAMERA)) is False
        assert policy.requests == [PermissionKind.CAMERA]
        assert not gate.has_permission(PermissionKind.CAMERA)

    def test_user_grant_and_revoke(self):
        policy = StaticPolicy(False)
        gate = PermissionGate(policy)

        gate.grant(PermissionKind.STORAGE)
        assert run(gate.request_permissions(RequestCode.GALLERY)) is True
        assert policy.requests == []

        gate.revoke(PermissionKind.STORAGE)
        assert run(gate.request_permissions(RequestCode.GALLERY)) is False


class TestSettingsPolicy:
    """Tests for the configuration driven policy."""

    def test_grants_by_default(self, settings: Settings):
        settings.ensure_directories()
        policy = SettingsPermissionPolicy(settings)

        assert run(policy(PermissionKind.CAMERA)) is True
        assert run(policy(PermissionKind.STORAGE)) is True

    def test_respects_configuration(self, tmp_path):
        settings = Settings(
            media_directory=str(tmp_path / "media"),
            auto_grant_camera=False,
            auto_grant_storage=False,
        )
        policy = SettingsPermissionPolicy(settings)

        assert run(policy(PermissionKind.CAMERA)) is False
        assert run(policy(PermissionKind.STORAGE)) is False

    def test_missing_media_directory_denies_storage(self, tmp_path):
        settings = Settings(media_directory=str(tmp_path / "missing"))
        policy = SettingsPermissionPolicy(settings)

        assert run(policy(PermissionKind.STORAGE)) is False


class TestAcquisition:
    """Tests for camera and gallery flows."""

    def test_camera_discards_warmup_frames(self, acquisition, camera):
        image = run(acquisition.capture_from_camera())

        assert camera.reads == 3
        assert image.source == ImageSource.CAMERA
        assert image.path.suffix == ".jpg"

    def test_closed_camera_is_cancellation(self, acquisition):
        camera = FakeCamera(None, opened=False)
        acquisition._camera_factory = lambda index: camera

        with pytest.raises(AppException) as info:
            run(acquisition.capture_from_camera())

        assert info.value.code == "ACQUISITION_CANCELLED"
        assert camera.released

    def test_gallery_pick_is_stored(self, acquisition, png_bytes):
        image = run(acquisition.pick_from_gallery(png_bytes, "Label.PNG"))

        assert image.path.read_bytes() == png_bytes
        assert image.path.suffix == ".png"
        assert image.path.parent == acquisition.store.directory

    @pytest.mark.parametrize("data, filename", [
        (b"not an image", "label.png"),
        (b"\x89PNG", "label.gif"),
    ])
    def test_invalid_gallery_files(self, acquisition, data, filename):
        with pytest.raises(AppException) as info:
            run(acquisition.pick_from_gallery(data, filename))

        assert info.value.code == "INVALID_IMAGE"

    def test_empty_gallery_pick_is_cancellation(self, acquisition):
        with pytest.raises(AppException) as info:
            run(acquisition.pick_from_gallery(b"", "label.png"))

        assert info.value.message == "Cancelled."


class TestMediaStore:
    """Tests for the media store."""

    def test_round_trip_frame(self, tmp_path, frame):
        store = MediaStore(tmp_path / "store")
        image = store.insert_frame(frame, ImageSource.CAMERA)

        loaded = store.load(image)

        assert loaded.shape == frame.shape
        assert image.name.startswith("camera_")

    def test_delete_only_inside_store(self, tmp_path, png_bytes):
        store = MediaStore(tmp_path / "store")
        image = store.insert_bytes(png_bytes, "png", ImageSource.GALLERY)
        outside = tmp_path / "outside.png"
        outside.write_bytes(png_bytes)

        assert store.delete(image) is True
        assert store.delete(image) is False
        assert store.delete(ImageReference(path=outside, source=ImageSource.GALLERY)) is False
        assert outside.exists()

    def test_unique_names(self, tmp_path, png_bytes):
        store = MediaStore(tmp_path / "store")
        names = {store.insert_bytes(png_bytes, "png", ImageSource.GALLERY).name for _ in range(5)}
        assert len(names) == 5


class TestImageUploadValidator:
    """Tests for gallery upload validation."""

    def test_size_limit(self, png_bytes):
        validator = ImageUploadValidator(["png"], max_bytes=10)
        is_valid, extension, error = validator.validate(png_bytes, "a.png")

        assert not is_valid
        assert extension is None
        assert "exceeds" in error

    def test_missing_name_defaults_to_jpg(self, png_bytes):
        validator = ImageUploadValidator(["png"], max_bytes=1024 * 1024)
        assert validator.validate(png_bytes) == (True, "jpg", None)


class TestNotificationCenter:
    """Tests for toast fan-out."""

    def test_history_is_bounded(self):
        center = NotificationCenter(history_size=2)
        for message in ("one", "two", "three"):
            center.publish(message)

        assert [n.message for n in center.recent()] == ["two", "three"]
        assert center.latest.message == "three"

    def test_subscribers_receive_notifications(self):
        async def scenario():
            center = NotificationCenter()
            queue = center.subscribe()
            center.publish("Pick Image First", NotificationLevel.ERROR, "NO_IMAGE_SELECTED")
            center.unsubscribe(queue)
            center.publish("unseen")
            return [queue.get_nowait() for _ in range(queue.qsize())]

        received = run(scenario())

        assert [n.code for n in received] == ["NO_IMAGE_SELECTED"]
