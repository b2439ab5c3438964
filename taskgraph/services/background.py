# Rev 0.2.0

"""Background execution (Rev 0.2.0)
Runs engine calls on a QThreadPool. Each submission returns a
concurrent.futures.Future carrying exactly the result or exception of the
synchronous call; optional callbacks fire on the worker thread before the
future resolves.
"""
from __future__ import annotations
from concurrent.futures import Future
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Set

from PySide6.QtCore import QRunnable, QThreadPool

from taskgraph.models.chart import FilterCriteria, GanttPayload
from taskgraph.utils.logging_setup import get_logger
from .dependency_service import DependencyService
from .gantt_service import GanttService

_log = get_logger("background")


class EngineJob(QRunnable):
    def __init__(
        self,
        fn: Callable[..., Any],
        args: tuple,
        kwargs: Dict[str, Any],
        future: Future,
        on_success: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[BaseException], None]] = None,
    ):
        super().__init__()
        self._fn = fn
        self._args = args
        self._kwargs = kwargs
        self._future = future
        self._on_success = on_success
        self._on_error = on_error

    def run(self) -> None:
        if not self._future.set_running_or_notify_cancel():
            return
        try:
            result = self._fn(*self._args, **self._kwargs)
        except Exception as exc:
            self._notify(self._on_error, exc)
            self._future.set_exception(exc)
            return
        self._notify(self._on_success, result)
        self._future.set_result(result)

    def _notify(self, callback: Optional[Callable[[Any], None]], value: Any) -> None:
        if callback is None:
            return
        try:
            callback(value)
        except Exception:
            _log.exception("Background callback %r failed", callback)


class BackgroundRunner:
    def __init__(self, max_threads: Optional[int] = None, pool: Optional[QThreadPool] = None):
        self._pool = pool or QThreadPool()
        if max_threads:
            self._pool.setMaxThreadCount(int(max_threads))

    @property
    def pool(self) -> QThreadPool:
        return self._pool

    def submit(
        self,
        fn: Callable[..., Any],
        *args: Any,
        on_success: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[BaseException], None]] = None,
        **kwargs: Any,
    ) -> Future:
        future: Future = Future()
        self._pool.start(EngineJob(fn, args, kwargs, future, on_success, on_error))
        return future

    def wait_for_done(self, msecs: int = -1) -> bool:
        return self._pool.waitForDone(msecs)


class GanttAsyncService:
    """Future-returning wrappers over the dependency and Gantt services."""

    def __init__(self, dependencies: DependencyService, gantt: GanttService, runner: BackgroundRunner):
        self._dependencies = dependencies
        self._gantt = gantt
        self._runner = runner

    @property
    def runner(self) -> BackgroundRunner:
        return self._runner

    def add_dependency_async(self, task_id: Optional[int], dependency_id: Optional[int], **callbacks) -> "Future[bool]":
        return self._runner.submit(self._dependencies.add_dependency, task_id, dependency_id, **callbacks)

    def remove_dependency_async(self, task_id: Optional[int], dependency_id: Optional[int], **callbacks) -> "Future[bool]":
        return self._runner.submit(self._dependencies.remove_dependency, task_id, dependency_id, **callbacks)

    def format_for_window_async(
        self,
        project_id: Optional[int],
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        **callbacks,
    ) -> "Future[GanttPayload]":
        return self._runner.submit(self._gantt.format_for_window, project_id, start_date, end_date, **callbacks)

    def apply_filters_async(self, payload: GanttPayload, criteria: FilterCriteria, **callbacks) -> "Future[GanttPayload]":
        return self._runner.submit(self._gantt.apply_filters, payload, criteria, **callbacks)

    def window_view_async(self, project_id: Optional[int], day: Optional[date] = None, **callbacks) -> "Future[GanttPayload]":
        return self._runner.submit(self._gantt.window_view, project_id, day, **callbacks)

    def task_dependency_map_async(self, project_id: Optional[int], **callbacks) -> "Future[Dict[int, List[int]]]":
        return self._runner.submit(self._gantt.task_dependency_map, project_id, **callbacks)

    def critical_path_async(self, project_id: Optional[int], **callbacks) -> "Future[Set[int]]":
        return self._runner.submit(self._gantt.critical_path, project_id, **callbacks)

    def bottlenecks_async(self, project_id: Optional[int], **callbacks) -> "Future[List[int]]":
        return self._runner.submit(self._gantt.bottlenecks, project_id, **callbacks)
