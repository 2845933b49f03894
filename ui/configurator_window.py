"""Configurator window: duration inputs, pause-media option and the Start/Stop toggle.

Values are read once per Start press; the driver receives a frozen
CycleConfig, so editing the fields while a cycle runs has no effect until the
next start.
"""
from __future__ import annotations

from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QCheckBox,
    QFormLayout,
    QLabel,
    QMessageBox,
    QPushButton,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from core.constants.timing import (
    DEFAULT_INTERVAL_MS,
    DEFAULT_SHOW_DURATION_MS,
    MAX_DURATION_MS,
    MIN_DURATION_MS,
)
from core.errors import NoImageFound
from core.logging.logger import get_logger
from engine.cycle_config import CycleConfig
from engine.cycle_driver import CycleDriver
from versioning import APP_WINDOW_TITLE

logger = get_logger(__name__)


def _duration_spin_box(value: int) -> QSpinBox:
    spin = QSpinBox()
    spin.setRange(MIN_DURATION_MS, MAX_DURATION_MS)
    spin.setValue(value)
    spin.setSuffix(" ms")
    spin.setSingleStep(100)
    spin.setAccelerated(True)
    return spin


class ConfiguratorWindow(QWidget):
    """Small control window driving a CycleDriver."""

    def __init__(self, driver: CycleDriver, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._driver = driver

        self.setWindowTitle(APP_WINDOW_TITLE)
        self.resize(300, 250)
        self._setup_ui()

        driver.running_changed.connect(self._on_running_changed)
        driver.cycle_failed.connect(self._on_cycle_failed)
        driver.iteration_completed.connect(self._on_iteration_completed)

    def _setup_ui(self) -> None:
        self.show_duration_input = _duration_spin_box(DEFAULT_SHOW_DURATION_MS)
        self.interval_input = _duration_spin_box(DEFAULT_INTERVAL_MS)
        self.pause_media_checkbox = QCheckBox("Pause media during display")
        self.pause_media_checkbox.setChecked(False)

        self.start_button = QPushButton("Start")
        self.start_button.clicked.connect(self._on_start_clicked)

        self.status_label = QLabel("Idle")
        self.status_label.setAlignment(Qt.AlignmentFlag.AlignCenter)

        form = QFormLayout()
        form.addRow("Show duration:", self.show_duration_input)
        form.addRow("Interval:", self.interval_input)

        layout = QVBoxLayout(self)
        layout.addLayout(form)
        layout.addWidget(self.pause_media_checkbox)
        layout.addWidget(self.start_button)
        layout.addWidget(self.status_label)
        layout.addStretch()

    def current_config(self) -> CycleConfig:
        """Snapshot the inputs as they are right now."""
        return CycleConfig(
            show_duration_ms=self.show_duration_input.value(),
            interval_ms=self.interval_input.value(),
            pause_media_on_show=self.pause_media_checkbox.isChecked(),
        )

    def _on_start_clicked(self) -> None:
        try:
            self._driver.toggle_start(self.current_config())
        except NoImageFound as exc:
            logger.warning("Start refused: %s", exc)
            self._show_error(
                "No image found in the application directory.\n\n"
                f"Place a .png or .jpg file in:\n{exc.base_dir}"
            )

    def _on_running_changed(self, running: bool) -> None:
        self.start_button.setText("Stop" if running else "Start")
        self.status_label.setText("Running" if running else "Idle")

    def _on_iteration_completed(self, count: int) -> None:
        self.status_label.setText(f"Running - shown {count} time{'s' if count != 1 else ''}")

    def _on_cycle_failed(self, message: str) -> None:
        self._show_error(message)

    def _show_error(self, message: str) -> None:
        QMessageBox.critical(self, "Error", message)

    def closeEvent(self, event: QCloseEvent) -> None:
        self._driver.stop()
        super().closeEvent(event)
