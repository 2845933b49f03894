"""
Tests for ThreadManager.

Covers:
- Pool initialization and configuration
- Task submission, callbacks and stats
- Single-worker serialization of cycle tasks
- UI thread dispatch (fire-and-forget and blocking)
- Shutdown behavior
"""
import threading
import time

import pytest

from core.threading.manager import (
    Task,
    TaskResult,
    ThreadManager,
    ThreadPoolType,
    UiCallTimeout,
)


class TestThreadManagerInit:
    """Thread manager initialization tests."""

    def test_init_creates_cycle_pool(self, thread_manager):
        assert ThreadPoolType.CYCLE in thread_manager._executors

    def test_cycle_pool_is_single_worker_by_default(self, thread_manager):
        assert thread_manager.config[ThreadPoolType.CYCLE] == 1

    def test_init_with_custom_config(self, qt_app):
        manager = ThreadManager(config={ThreadPoolType.CYCLE: 2})
        try:
            assert manager.config[ThreadPoolType.CYCLE] == 2
        finally:
            manager.shutdown()


class TestTaskClass:
    """Tests for Task wrapper class."""

    def test_task_with_args_and_kwargs(self):
        def greet(greeting, name="World"):
            return f"{greeting}, {name}"

        task = Task(greet, "Hi", name="Test")
        assert task.args == ("Hi",)
        assert task.kwargs == {"name": "Test"}

    def test_task_with_task_id(self):
        task = Task(lambda: None, task_id="my_task")
        assert task.task_id == "my_task"


class TestSubmit:
    """Task submission tests."""

    def test_callback_receives_result(self, thread_manager):
        done = threading.Event()
        results = []

        def callback(result: TaskResult):
            results.append(result)
            done.set()

        task_id = thread_manager.submit_cycle_task(lambda: 42, task_id="answer", callback=callback)

        assert task_id == "answer"
        assert done.wait(2.0)
        assert results[0].success is True
        assert results[0].result == 42
        assert results[0].task_id == "answer"

    def test_failure_is_reported_not_raised(self, thread_manager):
        done = threading.Event()
        results = []

        def boom():
            raise ValueError("broken")

        def callback(result: TaskResult):
            results.append(result)
            done.set()

        thread_manager.submit_cycle_task(boom, callback=callback)

        assert done.wait(2.0)
        assert results[0].success is False
        assert isinstance(results[0].error, ValueError)
        stats = thread_manager.get_pool_stats()["cycle"]
        assert stats["submitted"] == 1
        assert stats["failed"] == 1

    def test_cycle_tasks_never_overlap(self, thread_manager):
        release_first = threading.Event()
        order = []
        second_done = threading.Event()

        def first():
            order.append("first-start")
            release_first.wait(2.0)
            order.append("first-end")

        def second():
            order.append("second-start")
            second_done.set()

        thread_manager.submit_cycle_task(first)
        thread_manager.submit_cycle_task(second)

        time.sleep(0.05)
        assert "second-start" not in order
        release_first.set()

        assert second_done.wait(2.0)
        assert order == ["first-start", "first-end", "second-start"]

    def test_get_task_result_waits(self, thread_manager):
        task_id = thread_manager.submit_cycle_task(lambda: time.sleep(0.05) or "late")
        result = thread_manager.get_task_result(task_id, timeout=2.0)
        assert result.result == "late"

    def test_submit_after_shutdown_raises(self, qt_app):
        manager = ThreadManager()
        manager.shutdown()
        with pytest.raises(RuntimeError):
            manager.submit_cycle_task(lambda: None)

    def test_shutdown_is_idempotent(self, qt_app):
        manager = ThreadManager()
        manager.shutdown()
        manager.shutdown()


@pytest.mark.qt
class TestUiDispatch:
    """UI thread marshaling."""

    def test_run_on_ui_thread_executes_on_main_thread(self, qt_app, qtbot):
        main_ident = threading.get_ident()
        seen = []

        worker = threading.Thread(
            target=ThreadManager.run_on_ui_thread,
            args=(lambda: seen.append(threading.get_ident()),),
        )
        worker.start()
        worker.join(2.0)

        qtbot.waitUntil(lambda: len(seen) == 1, timeout=2000)
        assert seen == [main_ident]

    def test_run_on_ui_thread_inline_when_already_on_ui(self, qt_app):
        seen = []
        ThreadManager.run_on_ui_thread(seen.append, "now")
        assert seen == ["now"]

    def test_call_on_ui_thread_returns_value(self, qt_app, qtbot):
        main_ident = threading.get_ident()
        outcome = {}

        def _worker():
            outcome["value"] = ThreadManager.call_on_ui_thread(
                lambda a, b: (threading.get_ident(), a + b), 2, b=3
            )

        worker = threading.Thread(target=_worker)
        worker.start()
        qtbot.waitUntil(lambda: "value" in outcome, timeout=2000)
        worker.join(2.0)

        assert outcome["value"] == (main_ident, 5)

    def test_call_on_ui_thread_reraises_in_caller(self, qt_app, qtbot):
        outcome = {}

        def _fail():
            raise KeyError("missing")

        def _worker():
            try:
                ThreadManager.call_on_ui_thread(_fail)
            except KeyError as exc:
                outcome["error"] = exc

        worker = threading.Thread(target=_worker)
        worker.start()
        qtbot.waitUntil(lambda: "error" in outcome, timeout=2000)
        worker.join(2.0)

        assert isinstance(outcome["error"], KeyError)

    def test_call_on_ui_thread_times_out_and_cancels(self, qt_app):
        calls = []
        outcome = {}

        def _worker():
            try:
                ThreadManager.call_on_ui_thread(calls.append, "late", timeout_ms=50)
            except TimeoutError as exc:
                outcome["error"] = exc

        # The main thread blocks in join() and never drains the event loop.
        worker = threading.Thread(target=_worker)
        worker.start()
        worker.join(2.0)

        error = outcome.get("error")
        assert isinstance(error, UiCallTimeout)
        assert error.started is False

        # The queued call is delivered now but must not run anymore.
        qt_app.processEvents()
        assert calls == []

    def test_call_on_ui_thread_timeout_reports_started_call(self, qt_app, qtbot):
        calls = []
        outcome = {}

        def _slow():
            time.sleep(0.6)
            calls.append("ran")

        def _worker():
            try:
                ThreadManager.call_on_ui_thread(_slow, timeout_ms=200)
            except TimeoutError as exc:
                outcome["error"] = exc

        worker = threading.Thread(target=_worker)
        worker.start()
        qtbot.waitUntil(lambda: "error" in outcome and len(calls) == 1, timeout=3000)
        worker.join(2.0)

        error = outcome["error"]
        assert isinstance(error, UiCallTimeout)
        assert error.started is True
        # The call was already running, so it still completed.
        assert calls == ["ran"]
