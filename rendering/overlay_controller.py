"""Overlay controller: the single owner of the overlay surface and its state.

``show()``/``hide()`` may be called from any thread. The guarded work is
always executed on the UI thread (through ThreadManager.call_on_ui_thread),
and every read or write of the display state happens under one lock, so a
timer-driven show/hide can never interleave with a click dismissal.
"""
from __future__ import annotations

import threading
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from PySide6.QtCore import QObject, Signal
from PySide6.QtGui import QPixmap

from core.logging.logger import get_logger
from core.logging.tags import TAG_OVERLAY
from core.threading.manager import ThreadManager
from rendering.overlay_window import OverlayWindow
from utils.image_loader import ImageLoader

logger = get_logger(__name__)


class DisplayState(Enum):
    HIDDEN = "hidden"
    SHOWN = "shown"


class OverlayController(QObject):
    """Presents and hides the full-screen overlay.

    Signals:
        dismissed: the user clicked the overlay and it was hidden.
        visibility_changed(bool): emitted once per real Hidden/Shown
            transition, never for idempotent no-op calls.
    """

    dismissed = Signal()
    visibility_changed = Signal(bool)

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._lock = threading.RLock()
        self._state = DisplayState.HIDDEN
        self._window: Optional[OverlayWindow] = None
        self._pixmap: Optional[QPixmap] = None
        self._image_path: Optional[Path] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def initialize(self) -> None:
        """Create the surface in the hidden state. UI thread only, once."""
        if self._window is not None:
            raise RuntimeError("OverlayController.initialize() called twice")

        window = OverlayWindow()
        window.clicked.connect(self._on_surface_clicked)
        # Force native window creation now so the first show does not flicker.
        window.winId()
        window.hide()
        self._window = window
        logger.info("%s Overlay surface created", TAG_OVERLAY)

    def cleanup(self) -> None:
        """Hide and release the surface and the current image."""
        with self._lock:
            window = self._window
            self._window = None
            self._pixmap = None
            self._image_path = None
            self._state = DisplayState.HIDDEN
        if window is not None:
            window.hide()
            window.set_pixmap(None)
            window.deleteLater()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def state(self) -> DisplayState:
        with self._lock:
            return self._state

    def is_shown(self) -> bool:
        with self._lock:
            return self._state is DisplayState.SHOWN

    @property
    def window(self) -> Optional[OverlayWindow]:
        return self._window

    @property
    def image_path(self) -> Optional[Path]:
        with self._lock:
            return self._image_path

    # ------------------------------------------------------------------
    # Show / hide
    # ------------------------------------------------------------------
    def show(self, image_path: Union[str, Path]) -> bool:
        """Show ``image_path`` full-screen.

        Returns True when the overlay went from hidden to shown, False when
        it was already shown (no image is loaded in that case).

        Raises:
            ImageLoadFailure: the image could not be loaded. The overlay
                stays hidden.
        """
        return ThreadManager.call_on_ui_thread(self._show_on_ui, Path(image_path))

    def hide(self) -> bool:
        """Hide the overlay. Returns True if it was shown before the call."""
        return ThreadManager.call_on_ui_thread(self._hide_on_ui)

    def _require_window(self) -> OverlayWindow:
        if self._window is None:
            raise RuntimeError("OverlayController used before initialize()")
        return self._window

    def _show_on_ui(self, image_path: Path) -> bool:
        with self._lock:
            if self._state is DisplayState.SHOWN:
                logger.debug("%s show() ignored, already shown", TAG_OVERLAY)
                return False

            window = self._require_window()
            # Release the previous asset before decoding the next one.
            window.set_pixmap(None)
            self._pixmap = None
            self._image_path = None

            pixmap = ImageLoader.load_pixmap(image_path)

            self._pixmap = pixmap
            self._image_path = image_path
            window.set_pixmap(pixmap)
            window.cover_primary_screen()
            window.show()
            window.raise_()
            self._state = DisplayState.SHOWN
        logger.debug("%s Shown %s", TAG_OVERLAY, image_path)
        self.visibility_changed.emit(True)
        return True

    def _hide_on_ui(self) -> bool:
        with self._lock:
            window = self._require_window()
            window.hide()
            was_shown = self._state is DisplayState.SHOWN
            self._state = DisplayState.HIDDEN
        if was_shown:
            logger.debug("%s Hidden", TAG_OVERLAY)
            self.visibility_changed.emit(False)
        return was_shown

    def _on_surface_clicked(self) -> None:
        if self._hide_on_ui():
            logger.info("%s Dismissed by user click", TAG_OVERLAY)
            self.dismissed.emit()
