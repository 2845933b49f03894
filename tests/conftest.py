"""
Shared pytest fixtures for FlashFrame tests.
"""
import os
import sys
import threading

import pytest

# Overlay windows must never pop up on a developer's screen during tests.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtWidgets import QApplication  # noqa: E402


@pytest.fixture(scope='session')
def qt_app():
    """Create QApplication instance for tests."""
    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv)
    yield app
    # Don't quit - causes issues with pytest


@pytest.fixture
def thread_manager(qt_app):
    """Create ThreadManager instance for testing."""
    from core.threading.manager import ThreadManager
    manager = ThreadManager()
    yield manager
    manager.shutdown(wait=False)


@pytest.fixture
def temp_image(tmp_path):
    """Create a temporary red test image."""
    from PySide6.QtGui import QImage, QColor
    from PySide6.QtCore import QSize

    image = QImage(QSize(100, 100), QImage.Format.Format_RGB32)
    image.fill(QColor(255, 0, 0))

    image_path = tmp_path / "test_image.png"
    image.save(str(image_path))

    return image_path


@pytest.fixture
def overlay(qt_app):
    """Initialized OverlayController, cleaned up after the test."""
    from rendering.overlay_controller import OverlayController
    controller = OverlayController()
    controller.initialize()
    yield controller
    controller.cleanup()


class FakeMediaController:
    """Records play/pause toggles instead of touching the OS."""

    name = "fake"

    def __init__(self):
        self.calls = 0

    def play_pause(self) -> None:
        self.calls += 1


@pytest.fixture
def media():
    return FakeMediaController()


class HideBlockingOverlay:
    """Overlay stand-in whose hide() blocks until released."""

    def __init__(self):
        self.hide_entered = threading.Event()
        self.release = threading.Event()
        self.shown = False

    def is_shown(self) -> bool:
        return self.shown

    def show(self, image_path) -> bool:
        self.shown = True
        return True

    def hide(self) -> bool:
        self.hide_entered.set()
        self.release.wait(5.0)
        was_shown = self.shown
        self.shown = False
        return was_shown


@pytest.fixture
def hide_blocking_overlay():
    fake = HideBlockingOverlay()
    yield fake
    fake.release.set()
