"""Borderless, always-on-top, full-screen surface that paints one image."""
from typing import Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QGuiApplication, QMouseEvent, QPainter, QPaintEvent, QPixmap
from PySide6.QtWidgets import QWidget

from core.logging.logger import get_logger
from core.logging.tags import TAG_OVERLAY

logger = get_logger(__name__)


class OverlayWindow(QWidget):
    """Full-screen image surface.

    The pixmap is stretched over the whole window. Any mouse press emits
    ``clicked``; the window never hides itself, its owner decides.
    """

    clicked = Signal()

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._pixmap: Optional[QPixmap] = None

        flags = (
            Qt.WindowType.FramelessWindowHint
            | Qt.WindowType.WindowStaysOnTopHint
            | Qt.WindowType.Tool
        )
        self.setWindowFlags(flags)
        self.setAttribute(Qt.WidgetAttribute.WA_OpaquePaintEvent, True)
        self.setCursor(Qt.CursorShape.PointingHandCursor)

    def pixmap(self) -> Optional[QPixmap]:
        return self._pixmap

    def set_pixmap(self, pixmap: Optional[QPixmap]) -> None:
        """Bind a new image, dropping the reference to the previous one."""
        self._pixmap = pixmap
        self.update()

    def cover_primary_screen(self) -> None:
        screen = QGuiApplication.primaryScreen()
        if screen is None:
            logger.debug("%s No primary screen; keeping current geometry", TAG_OVERLAY)
            return
        self.setGeometry(screen.geometry())

    def paintEvent(self, event: QPaintEvent) -> None:
        painter = QPainter(self)
        try:
            if self._pixmap is None or self._pixmap.isNull():
                painter.fillRect(self.rect(), Qt.GlobalColor.black)
            else:
                painter.drawPixmap(self.rect(), self._pixmap)
        finally:
            painter.end()

    def mousePressEvent(self, event: QMouseEvent) -> None:
        self.clicked.emit()
        event.accept()
