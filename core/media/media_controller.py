"""Media key controller used to pause/resume system playback.

The cycle driver only needs one action: send the OS-wide play/pause toggle.
It is a toggle, not separate pause/resume primitives, so pausing and
resuming are the same call.

On Windows the key is injected through ``user32.keybd_event``; on Linux the
``playerctl`` helper is used when installed. Everything else falls back to
a no-op controller so callers never have to branch on platform. All
failures are soft (logged at debug) and never raise into the caller, since
the cycle thread calls these directly.
"""
from __future__ import annotations

import shutil
import subprocess
import sys
from typing import Optional

from core.constants.timing import MEDIA_COMMAND_TIMEOUT_MS
from core.logging.logger import get_logger
from core.logging.tags import TAG_FALLBACK, TAG_MEDIA

logger = get_logger(__name__)

# Windows virtual key / keybd_event constants
VK_MEDIA_PLAY_PAUSE = 0xB3
KEYEVENTF_EXTENDEDKEY = 0x0001
KEYEVENTF_KEYUP = 0x0002


class BaseMediaController:
    """Abstract media controller interface.

    Implementations must be safe to call from any thread and should catch
    and log their own failures rather than raising.
    """

    name = "base"

    def play_pause(self) -> None:  # pragma: no cover - interface
        """Send the play/pause toggle to the OS."""

        raise NotImplementedError


class NoOpMediaController(BaseMediaController):
    """Fallback controller used when no platform integration is available."""

    name = "noop"

    def play_pause(self) -> None:
        # Intentionally a no-op
        logger.debug("%s play_pause called on NoOpMediaController", TAG_MEDIA)


class WindowsMediaKeyController(BaseMediaController):
    """Injects VK_MEDIA_PLAY_PAUSE via ``user32.keybd_event``.

    A key-down followed by a key-up is sent so the key is not left logically
    held down for the foreground application.
    """

    name = "windows-keybd"

    def __init__(self, user32=None) -> None:
        self._user32 = user32
        if self._user32 is None:
            try:
                import ctypes

                self._user32 = ctypes.windll.user32  # type: ignore[attr-defined]
            except Exception as exc:
                logger.info("%s user32 not available: %s", TAG_MEDIA, exc)
                self._user32 = None

    @property
    def available(self) -> bool:
        return self._user32 is not None

    def play_pause(self) -> None:
        if self._user32 is None:
            return
        try:
            self._user32.keybd_event(VK_MEDIA_PLAY_PAUSE, 0, KEYEVENTF_EXTENDEDKEY, 0)
            self._user32.keybd_event(
                VK_MEDIA_PLAY_PAUSE, 0, KEYEVENTF_EXTENDEDKEY | KEYEVENTF_KEYUP, 0
            )
            logger.debug("%s Sent VK_MEDIA_PLAY_PAUSE", TAG_MEDIA)
        except Exception:
            logger.debug("%s keybd_event failed", TAG_MEDIA, exc_info=True)


class PlayerctlMediaController(BaseMediaController):
    """Linux MPRIS controller driving the ``playerctl`` command line tool."""

    name = "playerctl"

    def __init__(self, executable: Optional[str] = None) -> None:
        self._executable = executable or shutil.which("playerctl")

    @property
    def available(self) -> bool:
        return bool(self._executable)

    def play_pause(self) -> None:
        if not self._executable:
            return
        try:
            completed = subprocess.run(
                [self._executable, "play-pause"],
                capture_output=True,
                text=True,
                timeout=MEDIA_COMMAND_TIMEOUT_MS / 1000.0,
                check=False,
            )
        except (OSError, subprocess.SubprocessError):
            logger.debug("%s playerctl play-pause failed", TAG_MEDIA, exc_info=True)
            return
        if completed.returncode != 0:
            logger.debug(
                "%s playerctl exited with %s: %s",
                TAG_MEDIA,
                completed.returncode,
                (completed.stderr or "").strip(),
            )
        else:
            logger.debug("%s Sent playerctl play-pause", TAG_MEDIA)


def create_media_controller(platform: Optional[str] = None) -> BaseMediaController:
    """Factory that returns the best available media controller.

    Prefers the native key injector on Windows and playerctl elsewhere,
    falling back to a NoOp controller when neither is usable.
    """

    platform = platform or sys.platform
    try:
        if platform.startswith("win"):
            controller = WindowsMediaKeyController()
            if controller.available:
                logger.info("%s Using Windows media key injection", TAG_MEDIA)
                return controller
        else:
            controller = PlayerctlMediaController()
            if controller.available:
                logger.info("%s Using playerctl for media control", TAG_MEDIA)
                return controller
    except Exception:
        logger.debug("%s Failed to initialize platform media controller", TAG_MEDIA, exc_info=True)

    logger.info("%s %s Falling back to NoOpMediaController", TAG_MEDIA, TAG_FALLBACK)
    return NoOpMediaController()
