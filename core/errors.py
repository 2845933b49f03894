"""Error taxonomy for FlashFrame.

Cancellation is not an error: a cancelled wait is a normal loop exit
and is reported through ``WaitResult.CANCELLED`` rather than an exception.
"""
from __future__ import annotations

from pathlib import Path
from typing import Union


class FlashFrameError(Exception):
    """Base class for errors surfaced to the user."""


class NoImageFound(FlashFrameError):
    """No candidate image exists in the lookup directory at cycle start."""

    def __init__(self, base_dir: Union[str, Path]):
        self.base_dir = Path(base_dir)
        super().__init__(f"No image found in {self.base_dir}")


class ImageLoadFailure(FlashFrameError):
    """The image could not be read or decoded when the overlay tried to show it."""

    def __init__(self, path: Union[str, Path], reason: str = "unreadable or not a supported image"):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Failed to load image {self.path}: {reason}")


__all__ = ["FlashFrameError", "NoImageFound", "ImageLoadFailure"]
