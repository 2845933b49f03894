"""
FlashFrame - Main Entry Point

Shows the configurator window; while a cycle runs, a full-screen image is
flashed every interval for the configured duration.
"""
import argparse
import os
import sys
from pathlib import Path
from typing import List, Optional

from PySide6.QtWidgets import QApplication, QMessageBox

from core.logging.logger import get_logger, setup_logging
from core.media.media_controller import create_media_controller
from engine.cycle_driver import CycleDriver
from rendering.overlay_controller import OverlayController
from ui.configurator_window import ConfiguratorWindow
from utils.image_loader import IMAGE_DIR_ENV, default_image_dir
from versioning import APP_DESCRIPTION, APP_EXE_NAME, APP_NAME, APP_VERSION

logger = get_logger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse FlashFrame command-line arguments.

    Unknown arguments are left for Qt (e.g. ``-platform offscreen``).
    """
    parser = argparse.ArgumentParser(prog=APP_EXE_NAME, description=APP_DESCRIPTION)
    parser.add_argument("-d", "--debug", action="store_true",
                        help="Enable debug logging and console output")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable high-volume debug logging (implies --debug)")
    parser.add_argument("--image-dir", type=Path, default=None,
                        help=f"Directory searched for the overlay image (default: ${IMAGE_DIR_ENV} "
                             "or the application directory)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    args, _unknown = parser.parse_known_args(argv)
    return args


def resolve_image_dir(cli_value: Optional[Path]) -> Path:
    if cli_value is not None:
        return cli_value.expanduser()
    return default_image_dir()


def run_app(app: QApplication, image_dir: Path) -> int:
    """Build the overlay, driver and configurator, then enter the event loop."""
    overlay = OverlayController()
    overlay.initialize()

    driver = CycleDriver(
        overlay,
        media_controller=create_media_controller(),
        image_dir=image_dir,
    )
    window = ConfiguratorWindow(driver)

    def _on_about_to_quit() -> None:
        logger.info("Application quitting - stopping cycle")
        driver.shutdown()
        overlay.cleanup()

    app.aboutToQuit.connect(_on_about_to_quit)

    window.show()
    logger.info("Configurator shown (image dir: %s) - entering event loop", image_dir)
    return app.exec()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for FlashFrame."""
    args = parse_args(argv)
    setup_logging(debug=args.debug, verbose=args.verbose)

    logger.info("=" * 60)
    logger.info("%s %s Starting", APP_NAME, APP_VERSION)
    logger.info("=" * 60)

    image_dir = resolve_image_dir(args.image_dir)
    if args.image_dir is None and os.getenv(IMAGE_DIR_ENV):
        logger.info("Image dir taken from $%s", IMAGE_DIR_ENV)

    app = QApplication(sys.argv)
    app.setApplicationName(APP_EXE_NAME)
    app.setApplicationVersion(APP_VERSION)

    exit_code = 0
    try:
        exit_code = run_app(app, image_dir)
    except Exception as e:
        logger.exception("Fatal error in main: %s", e)
        QMessageBox.critical(None, f"{APP_NAME} Error", f"{APP_NAME} failed:\n{e}")
        exit_code = 1

    logger.info("=" * 60)
    logger.info("%s Exiting (code=%s)", APP_NAME, exit_code)
    logger.info("=" * 60)
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
