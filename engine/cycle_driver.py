"""
Cycle driver: the cancellable interval -> show -> duration -> hide loop.

Threading model:
- ``toggle_start``/``stop`` run on the UI thread and own the live
  CycleHandle. At most one handle is live at a time.
- The loop itself runs on the ThreadManager CYCLE pool. It only blocks in
  the two cancellable waits and in calls marshaled to the UI thread by the
  OverlayController.
- Cancellation is cooperative and only observed at the two waits; a show or
  hide that has started always completes.
"""
from __future__ import annotations

import itertools
import threading
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Union

from PySide6.QtCore import QObject, Signal

from core.errors import FlashFrameError, NoImageFound
from core.logging.logger import get_logger, is_verbose_logging
from core.logging.tags import TAG_CYCLE
from core.media.media_controller import BaseMediaController, create_media_controller
from core.threading.manager import TaskResult, ThreadManager, UiCallTimeout
from engine.cycle_config import CycleConfig
from rendering.overlay_controller import OverlayController
from utils.image_loader import default_image_dir, find_first_image

logger = get_logger(__name__)

_cycle_ids = itertools.count(1)


class WaitResult(Enum):
    ELAPSED = "elapsed"
    CANCELLED = "cancelled"


class CycleHandle:
    """One running loop and its cancellation signal.

    ``finished`` is set once the loop has fully returned, which lets a
    successor loop wait for its predecessor.
    """

    def __init__(self, config: CycleConfig, image_path: Path,
                 previous: Optional["CycleHandle"] = None):
        self.cycle_id = next(_cycle_ids)
        self.config = config
        self.image_path = image_path
        self.previous = previous
        self.iterations = 0
        self._cancel = threading.Event()
        self._finished = threading.Event()

    def __repr__(self) -> str:
        return f"<CycleHandle #{self.cycle_id} cancelled={self.cancelled} finished={self.finished}>"

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    @property
    def finished(self) -> bool:
        return self._finished.is_set()

    def cancel(self) -> None:
        self._cancel.set()

    def wait(self, duration_ms: int) -> WaitResult:
        """Sleep for ``duration_ms`` unless cancelled first."""
        if self._cancel.wait(duration_ms / 1000.0):
            return WaitResult.CANCELLED
        return WaitResult.ELAPSED

    def mark_finished(self) -> None:
        self._finished.set()

    def wait_finished(self, timeout: Optional[float] = None) -> bool:
        return self._finished.wait(timeout)


class CycleDriver(QObject):
    """Runs the periodic show/hide cycle behind a single Start/Stop toggle.

    Signals:
        running_changed(bool): the running indicator flipped.
        cycle_failed(str): a started cycle ended because of an error.
        iteration_completed(int): a full show/hide iteration finished; the
            argument is the number of iterations in the current cycle.
    """

    running_changed = Signal(bool)
    cycle_failed = Signal(str)
    iteration_completed = Signal(int)

    def __init__(
        self,
        overlay: OverlayController,
        media_controller: Optional[BaseMediaController] = None,
        thread_manager: Optional[ThreadManager] = None,
        image_dir: Optional[Union[str, Path]] = None,
        image_finder: Callable[[Union[str, Path]], Optional[Path]] = find_first_image,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._overlay = overlay
        self._media = media_controller or create_media_controller()
        self._owns_thread_manager = thread_manager is None
        self._thread_manager = thread_manager or ThreadManager()
        self._image_dir = Path(image_dir) if image_dir is not None else default_image_dir()
        self._image_finder = image_finder
        self._handle: Optional[CycleHandle] = None
        self._last_handle: Optional[CycleHandle] = None

    @property
    def image_dir(self) -> Path:
        return self._image_dir

    @property
    def handle(self) -> Optional[CycleHandle]:
        return self._handle

    def is_running(self) -> bool:
        return self._handle is not None

    # ------------------------------------------------------------------
    # Public API (UI thread)
    # ------------------------------------------------------------------
    def toggle_start(self, config: CycleConfig) -> bool:
        """Stop the live cycle, or start a new one when none is live.

        Returns True when a cycle was started and False when one was
        stopped.

        Raises:
            NoImageFound: no image in the lookup directory; nothing started.
        """
        if self._handle is not None:
            self.stop()
            return False

        image_path = self._image_finder(self._image_dir)
        if image_path is None:
            logger.warning("%s Not starting: no image in %s", TAG_CYCLE, self._image_dir)
            raise NoImageFound(self._image_dir)

        previous = self._last_handle
        if previous is not None and previous.finished:
            previous = None
        handle = CycleHandle(config, Path(image_path), previous=previous)
        self._handle = handle
        self._last_handle = handle

        logger.info(
            "%s Starting cycle #%d: image=%s interval=%dms duration=%dms (%dms per iteration) pause_media=%s",
            TAG_CYCLE,
            handle.cycle_id,
            handle.image_path,
            config.interval_ms,
            config.show_duration_ms,
            config.iteration_ms,
            config.pause_media_on_show,
        )
        self._thread_manager.submit_cycle_task(
            self._run_cycle,
            handle,
            task_id=f"cycle_{handle.cycle_id}",
            callback=lambda result: self._on_task_done(handle, result),
        )
        self.running_changed.emit(True)
        return True

    def stop(self) -> None:
        """Signal the live cycle to end. The overlay is left as it is."""
        handle = self._handle
        if handle is None:
            return
        handle.cancel()
        self._handle = None
        logger.info("%s Stop requested for cycle #%d", TAG_CYCLE, handle.cycle_id)
        self.running_changed.emit(False)

    def shutdown(self) -> None:
        """Application exit: cancel the live cycle and release the pool."""
        self.stop()
        if self._owns_thread_manager:
            # A running loop may be waiting on this (UI) thread; don't join it.
            self._thread_manager.shutdown(wait=False)

    # ------------------------------------------------------------------
    # Loop (cycle thread)
    # ------------------------------------------------------------------
    def _run_cycle(self, handle: CycleHandle) -> int:
        previous = handle.previous
        handle.previous = None
        if previous is not None and not previous.finished:
            logger.debug("%s Cycle #%d waiting for cycle #%d to exit",
                         TAG_CYCLE, handle.cycle_id, previous.cycle_id)
            previous.wait_finished()

        config = handle.config
        try:
            while not handle.cancelled:
                if handle.wait(config.interval_ms) is WaitResult.CANCELLED:
                    break

                paused_media = False
                if config.pause_media_on_show and not self._overlay.is_shown():
                    self._media.play_pause()
                    paused_media = True

                try:
                    self._overlay.show(handle.image_path)
                except Exception as exc:
                    # A timed-out show that had already started still completes.
                    show_completes = isinstance(exc, UiCallTimeout) and exc.started
                    if paused_media and not show_completes:
                        self._media.play_pause()
                    raise

                if handle.wait(config.show_duration_ms) is WaitResult.CANCELLED:
                    # The overlay (and a paused player) are left as they are.
                    break

                self._overlay.hide()
                if paused_media:
                    self._media.play_pause()

                handle.iterations += 1
                if is_verbose_logging():
                    logger.debug("%s Cycle #%d iteration %d done",
                                 TAG_CYCLE, handle.cycle_id, handle.iterations)
                ThreadManager.run_on_ui_thread(self._on_iteration_done, handle, handle.iterations)
        finally:
            handle.mark_finished()
        logger.info("%s Cycle #%d exited after %d iterations",
                    TAG_CYCLE, handle.cycle_id, handle.iterations)
        return handle.iterations

    def _on_task_done(self, handle: CycleHandle, result: TaskResult) -> None:
        # Runs on the cycle thread once the loop has returned or raised.
        failure: Optional[str] = None
        if not result.success:
            error = result.error
            if isinstance(error, FlashFrameError):
                failure = str(error)
            else:
                failure = f"Unexpected error: {error}"
            logger.error("%s Cycle aborted: %s", TAG_CYCLE, failure)
        ThreadManager.run_on_ui_thread(self._on_cycle_exited, handle, failure)

    def _on_iteration_done(self, handle: CycleHandle, count: int) -> None:
        # A stopped or replaced cycle may still finish the iteration it was in.
        if self._handle is handle:
            self.iteration_completed.emit(count)

    def _on_cycle_exited(self, handle: CycleHandle, failure: Optional[str]) -> None:
        if self._handle is handle:
            self._handle = None
            self.running_changed.emit(False)
        if failure is not None:
            self.cycle_failed.emit(failure)
