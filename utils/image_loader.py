"""Image lookup and loading utilities.

``find_first_image`` is the lookup collaborator used when a cycle starts;
``ImageLoader.load_pixmap`` decodes the chosen file on the UI thread when the
overlay is about to be shown.
"""
from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Iterable, List, Optional, Union

from PySide6.QtGui import QPixmap

from core.errors import ImageLoadFailure
from core.logging.logger import get_logger
from core.logging.tags import TAG_IMAGE

logger = get_logger(__name__)

IMAGE_DIR_ENV = "FLASHFRAME_IMAGE_DIR"

# Lookup priority: every .png beats every .jpg.
IMAGE_EXTENSIONS: tuple = (".png", ".jpg")


def default_image_dir() -> Path:
    """Return the directory searched for the overlay image.

    ``FLASHFRAME_IMAGE_DIR`` wins when set; otherwise the directory of the
    executable for frozen builds, or the project root when running from
    source.
    """
    env_dir = os.getenv(IMAGE_DIR_ENV)
    if env_dir:
        return Path(env_dir).expanduser()
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parent.parent


def list_candidate_images(base_dir: Union[str, Path],
                          extensions: Iterable[str] = IMAGE_EXTENSIONS) -> List[Path]:
    """Return image files in ``base_dir`` grouped by extension priority.

    Only the top level of ``base_dir`` is searched. Within one extension the
    files are sorted by name so the choice is stable across platforms.
    """
    base = Path(base_dir)
    if not base.is_dir():
        logger.debug("%s Lookup directory does not exist: %s", TAG_IMAGE, base)
        return []

    entries = [p for p in base.iterdir() if p.is_file()]
    candidates: List[Path] = []
    for ext in extensions:
        matches = sorted(
            (p for p in entries if p.suffix.lower() == ext.lower()),
            key=lambda p: p.name.lower(),
        )
        candidates.extend(matches)
    return candidates


def find_first_image(base_dir: Union[str, Path]) -> Optional[Path]:
    """Return the first image by extension priority, or None."""
    candidates = list_candidate_images(base_dir)
    if not candidates:
        logger.info("%s No image found in %s", TAG_IMAGE, base_dir)
        return None
    logger.info("%s Using image %s (%d candidates)", TAG_IMAGE, candidates[0], len(candidates))
    return candidates[0]


class ImageLoader:
    """Unified image loading interface."""

    @staticmethod
    def load_pixmap(path: Union[str, Path]) -> QPixmap:
        """Load a QPixmap from disk.

        Must be called on the UI thread (QPixmap is a GUI-thread resource).

        Raises:
            ImageLoadFailure: the file is missing, unreadable, or cannot be
                decoded.
        """
        path = Path(path)
        if not path.is_file():
            logger.warning("%s Image disappeared: %s", TAG_IMAGE, path)
            raise ImageLoadFailure(path, "file does not exist")

        pixmap = QPixmap(str(path))
        if pixmap.isNull():
            logger.warning("%s Failed to decode image: %s", TAG_IMAGE, path)
            raise ImageLoadFailure(path, "unreadable or not a supported image")

        logger.debug("%s Loaded %s (%dx%d)", TAG_IMAGE, path, pixmap.width(), pixmap.height())
        return pixmap
