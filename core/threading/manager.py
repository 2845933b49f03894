"""
Thread Manager for FlashFrame

Owns the background pool that runs display cycles and the utilities that
marshal work back onto the Qt UI thread. The UI invoker below is the single
consumer of every surface mutation: background code emits a queued signal and
the UI thread executes the callable when its event loop drains.
"""
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

from PySide6.QtCore import QCoreApplication, QObject, QThread, Signal

from core.constants.timing import UI_CALL_TIMEOUT_MS
from core.logging.logger import get_logger, is_verbose_logging
from core.logging.tags import TAG_THREADING

logger = get_logger(__name__)


# UI-thread invoker for reliable main thread dispatch
class _UiInvoker(QObject):
    invoke = Signal(object, object, object)

    def __init__(self):
        super().__init__()
        self.invoke.connect(self._on_invoke)

    def _on_invoke(self, func, args, kwargs):
        try:
            func(*args, **(kwargs or {}))
        except Exception as e:
            logger.exception("UI invoker callable raised: %s", e)


_ui_invoker: Optional[_UiInvoker] = None
_ui_invoker_lock = threading.Lock()


def _ensure_ui_invoker() -> Optional[_UiInvoker]:
    global _ui_invoker
    app = QCoreApplication.instance()
    if app is None:
        logger.error("%s UI dispatch requested without a QCoreApplication", TAG_THREADING)
        return None
    with _ui_invoker_lock:
        if _ui_invoker is None:
            inv = _UiInvoker()
            inv.moveToThread(app.thread())
            _ui_invoker = inv
    return _ui_invoker


class UiCallTimeout(TimeoutError):
    """A call marshaled to the UI thread did not finish in time.

    ``started`` is True when the UI thread had already begun running the
    call, which then still completes; False when it was cancelled before
    it ran.
    """

    def __init__(self, message: str, started: bool):
        super().__init__(message)
        self.started = started


class ThreadPoolType(Enum):
    """Thread pool types for FlashFrame workloads"""
    CYCLE = "cycle"         # Display cycle loops (timed waits, show/hide decisions)


@dataclass
class TaskResult:
    """Container for task execution results"""
    success: bool
    result: Any = None
    error: Optional[Exception] = None
    execution_time: float = 0.0
    task_id: Optional[str] = None


class Task:
    """Wrapper for executable tasks with metadata"""
    def __init__(self, func: Callable, *args, task_id: str = None, **kwargs):
        self.func = func
        self.args = args
        self.kwargs = kwargs
        self.task_id = task_id or f"task_{id(self)}"
        self.created_at = time.time()
        self.future: Optional[Future] = None


class ThreadManager:
    """
    Centralized thread manager for FlashFrame.

    Features:
    - A single-worker CYCLE pool: a cycle submitted while a previous one is
      still winding down only starts after the previous loop has returned
    - Task result callbacks
    - UI thread dispatch, fire-and-forget or blocking with a timeout
    """
    def __init__(self, config: Optional[Dict[ThreadPoolType, int]] = None):
        """
        Initialize thread manager.

        Args:
            config: Dictionary mapping ThreadPoolType to max_workers count
        """
        self._shutdown = False

        default_config = {
            ThreadPoolType.CYCLE: 1,
        }
        self.config = {**default_config, **(config or {})}

        self._executors: Dict[ThreadPoolType, ThreadPoolExecutor] = {}
        self._active_tasks: Dict[str, Task] = {}
        self._stats = {pool_type: {'submitted': 0, 'completed': 0, 'failed': 0}
                       for pool_type in ThreadPoolType}
        self._lock = threading.Lock()

        self._initialize_pools()

        # Create the invoker while we are (normally) on the UI thread.
        if QCoreApplication.instance() is not None:
            _ensure_ui_invoker()

        logger.info("ThreadManager initialized with CYCLE=%d workers",
                    self.config[ThreadPoolType.CYCLE])

    def _initialize_pools(self):
        """Initialize thread pools based on configuration."""
        for pool_type, max_workers in self.config.items():
            executor = ThreadPoolExecutor(
                max_workers=max_workers,
                thread_name_prefix=f"{pool_type.value}_pool"
            )
            self._executors[pool_type] = executor
            logger.info("%s Initialized %s pool with %d workers",
                        TAG_THREADING, pool_type.value, max_workers)

    def submit_task(self, pool_type: ThreadPoolType, func: Callable, *args,
                    task_id: str = None,
                    callback: Callable[[TaskResult], None] = None, **kwargs) -> str:
        """
        Submit a task to the specified thread pool.

        Args:
            pool_type: Which thread pool to use
            func: Function to execute
            *args: Positional arguments for func
            task_id: Optional unique identifier
            callback: Optional callback for result, invoked on the worker thread
            **kwargs: Keyword arguments for func

        Returns:
            str: Task ID for tracking
        """
        if self._shutdown:
            raise RuntimeError("Thread manager is shut down")

        task = Task(func, *args, task_id=task_id, **kwargs)
        executor = self._executors[pool_type]

        def wrapped_func():
            start_time = time.time()
            try:
                result = task.func(*task.args, **task.kwargs)
                task_result = TaskResult(
                    success=True,
                    result=result,
                    execution_time=time.time() - start_time,
                    task_id=task.task_id
                )
                self._record(pool_type, 'completed')
            except Exception as e:
                task_result = TaskResult(
                    success=False,
                    error=e,
                    execution_time=time.time() - start_time,
                    task_id=task.task_id
                )
                logger.error("Task %s failed: %s", task.task_id, e, exc_info=True)
                self._record(pool_type, 'failed')
            finally:
                with self._lock:
                    self._active_tasks.pop(task.task_id, None)

            if callback:
                try:
                    callback(task_result)
                except Exception as e:
                    logger.error("Callback for task %s failed: %s", task.task_id, e)

            return task_result

        with self._lock:
            self._active_tasks[task.task_id] = task
        self._record(pool_type, 'submitted')
        task.future = executor.submit(wrapped_func)

        if is_verbose_logging():
            logger.debug("%s Submitted task %s to %s pool", TAG_THREADING, task.task_id, pool_type.value)
        return task.task_id

    def submit_cycle_task(self, func: Callable, *args, **kwargs) -> str:
        """Convenience method for CYCLE pool submissions"""
        return self.submit_task(ThreadPoolType.CYCLE, func, *args, **kwargs)

    def get_task_result(self, task_id: str, timeout: Optional[float] = None) -> TaskResult:
        """Wait for and return the result of a still-tracked task."""
        with self._lock:
            task = self._active_tasks.get(task_id)
        if not task or task.future is None:
            raise KeyError(f"Task {task_id} not found")
        try:
            return task.future.result(timeout=timeout)
        except FutureTimeoutError:
            raise TimeoutError(f"Task {task_id} did not complete within {timeout}s")

    def get_pool_stats(self) -> Dict[str, Dict[str, int]]:
        """Get statistics for all thread pools"""
        with self._lock:
            return {pool_type.value: stats.copy()
                    for pool_type, stats in self._stats.items()}

    def _record(self, pool_type: ThreadPoolType, kind: str) -> None:
        with self._lock:
            self._stats[pool_type][kind] += 1

    def shutdown(self, wait: bool = True):
        """
        Shutdown all thread pools.

        Args:
            wait: Whether to wait for running tasks. Pass False from the UI
                thread when a running task may itself be waiting on the UI
                thread.
        """
        if self._shutdown:
            return
        self._shutdown = True
        logger.info("Shutting down thread manager...")

        with self._lock:
            pending = list(self._active_tasks.keys())
        if pending:
            logger.info("%s %d tasks still active during shutdown: %s",
                        TAG_THREADING, len(pending), pending)

        for pool_type, executor in self._executors.items():
            try:
                executor.shutdown(wait=wait, cancel_futures=not wait)
            except Exception as e:
                logger.error("Error shutting down %s pool: %s", pool_type.value, e)

        self._executors.clear()
        logger.info("Thread manager shut down complete")

    # UI dispatch utilities ----------------------------------------------
    @staticmethod
    def run_on_ui_thread(func: Callable, *args, **kwargs) -> None:
        """Dispatch a callable to the Qt UI thread without waiting for it"""
        try:
            app = QCoreApplication.instance()
            if app is None:
                logger.debug("run_on_ui_thread called without QCoreApplication")
                return

            if QThread.currentThread() is app.thread():
                func(*args, **(kwargs or {}))
                return

            inv = _ensure_ui_invoker()
            if inv is None:
                raise RuntimeError("UI invoker unavailable")
            inv.invoke.emit(func, args, kwargs or {})
        except Exception as e:
            logger.exception("run_on_ui_thread dispatch failed: %s", e)

    @staticmethod
    def call_on_ui_thread(func: Callable, *args,
                          timeout_ms: int = UI_CALL_TIMEOUT_MS, **kwargs) -> Any:
        """Run a callable on the Qt UI thread and return its result.

        Exceptions raised by ``func`` are re-raised in the calling thread.
        Raises UiCallTimeout when the call does not finish within
        ``timeout_ms``. A call that had not started yet is cancelled and
        will not run later; one already running is left to complete.
        """
        app = QCoreApplication.instance()
        if app is None:
            raise RuntimeError("call_on_ui_thread called without QCoreApplication")

        if QThread.currentThread() is app.thread():
            return func(*args, **kwargs)

        inv = _ensure_ui_invoker()
        if inv is None:
            raise RuntimeError("UI invoker unavailable")

        future: Future = Future()

        def _run() -> None:
            if not future.set_running_or_notify_cancel():
                return
            try:
                future.set_result(func(*args, **kwargs))
            except BaseException as exc:
                future.set_exception(exc)

        inv.invoke.emit(_run, (), {})
        try:
            return future.result(timeout=max(0, timeout_ms) / 1000.0)
        except FutureTimeoutError:
            if future.done():
                return future.result()
            # cancel() fails once the UI thread has picked the call up.
            started = not future.cancel()
            name = getattr(func, "__qualname__", repr(func))
            state = "still running" if started else "not started"
            raise UiCallTimeout(
                f"UI thread did not finish {name} within {timeout_ms}ms ({state})",
                started=started,
            )
