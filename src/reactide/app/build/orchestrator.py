"""Build/run state machine coordinating a build strategy and a streamed log."""

from __future__ import annotations

import queue
import threading
import time
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, TypeVar, Union

from reactide.domain.build_status import BuildState, BuildStatus
from reactide.domain.errors import ProjectIOError
from reactide.domain.project import Project
from reactide.ports.build_strategy import BuildStrategy, LogSink
from reactide.settings import SETTINGS, RuntimeSettings
from reactide.utils.telemetry import TelemetryError, record_structured_event

BUILD_SUCCESS_MESSAGE = "Build completed successfully"
BUILD_FAILURE_MESSAGE = "Build failed"
NO_BUILD_MESSAGE = "No build found. Please run Build first."

T = TypeVar("T")


@dataclass(frozen=True)
class OrchestratorSnapshot:
    status: BuildStatus
    log: str


Observer = Callable[[OrchestratorSnapshot], None]


@dataclass(frozen=True)
class _Publish:
    """Queue marker: publish a snapshot, carrying ``status`` when it changed."""

    status: Optional[BuildStatus] = None


_QueueItem = Union[str, _Publish, None]


def _completed(value: T) -> "Future[T]":
    future: Future[T] = Future()
    future.set_result(value)
    return future


class BuildOrchestrator:
    """Runs build/run/stop on a single background worker and publishes snapshots.

    Status is written only by the worker (and by ``build`` when it claims the
    Building state). Status changes, log lines and log resets all go through
    one queue, and the collector thread draining it is the only caller of the
    observers, so they see snapshots in order and from a single thread.
    ``flush_log`` waits until everything queued so far has been published.

    The output directory is not locked: a build started while a previous
    output is being served rewrites the files under the running server.
    """

    def __init__(
        self,
        strategy: BuildStrategy,
        *,
        settings: RuntimeSettings = SETTINGS,
        executor: Executor | None = None,
    ) -> None:
        self._strategy = strategy
        self._settings = settings
        self._executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="reactide-orchestrator")
        self._status = BuildStatus.idle()
        self._log_parts: List[str] = []
        self._observers: List[Observer] = []
        self._lock = threading.RLock()
        self._log_queue: "queue.Queue[_QueueItem]" = queue.Queue()
        self._published_status = self._status
        self._collector = threading.Thread(target=self._collect_log, name="reactide-log-collector", daemon=True)
        self._collector.start()
        self._closed = False

    # ------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------

    @property
    def strategy(self) -> BuildStrategy:
        return self._strategy

    @property
    def status(self) -> BuildStatus:
        with self._lock:
            return self._status

    @property
    def log(self) -> str:
        with self._lock:
            return "".join(self._log_parts)

    def snapshot(self) -> OrchestratorSnapshot:
        with self._lock:
            return OrchestratorSnapshot(self._status, "".join(self._log_parts))

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        with self._lock:
            self._observers.append(observer)

        def _unsubscribe() -> None:
            with self._lock:
                if observer in self._observers:
                    self._observers.remove(observer)

        return _unsubscribe

    def emit(self, line: str) -> None:
        """Append one line to the log (thread-safe, asynchronous)."""

        self._log_queue.put(line)

    def flush_log(self) -> None:
        self._log_queue.join()

    def clear_log(self) -> None:
        with self._lock:
            self._log_parts = []
        self._log_queue.put(_Publish())

    def is_running(self) -> bool:
        return self._strategy.is_running()

    def address(self) -> str | None:
        return self._strategy.address()

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def build(self, project: Project, on_log: LogSink | None = None) -> "Future[bool]":
        sink = self._sink(on_log)
        with self._lock:
            if self._status.is_busy:
                sink(f"Build rejected: already {self._status.state.value}")
                return _completed(False)
            self._status = BuildStatus.building()
            self._log_queue.put(_Publish(self._status))
        return self._executor.submit(self._do_build, project, sink)

    def run(self, project: Project, on_log: LogSink | None = None) -> "Future[None]":
        return self._executor.submit(self._do_run, project, self._sink(on_log))

    def stop(self) -> "Future[None]":
        return self._executor.submit(self._do_stop)

    def close(self) -> None:
        """Stop serving, drain the log and release worker threads."""

        if self._closed:
            return
        self._closed = True
        self._executor.submit(self._strategy.stop).result()
        self._executor.shutdown(wait=True)
        self._log_queue.put(None)
        self._collector.join(timeout=5)

    # ------------------------------------------------------------------
    # Worker-side transitions
    # ------------------------------------------------------------------

    def _do_build(self, project: Project, sink: LogSink) -> bool:
        start = time.perf_counter()
        sink("Starting build process...")
        try:
            if not project.exists():
                raise ProjectIOError(f"project directory not found: {project.root}")
            success = self._strategy.build(project, sink)
        except Exception as exc:  # noqa: BLE001 - every failure ends in Error status
            message = str(exc) or exc.__class__.__name__
            sink(f"Build error: {message}")
            self._transition(BuildStatus.error(message))
            self._record("build", project, start, status="error", error=message)
            return False
        if success:
            sink(BUILD_SUCCESS_MESSAGE)
            self._transition(BuildStatus.success(BUILD_SUCCESS_MESSAGE))
        else:
            sink(BUILD_FAILURE_MESSAGE)
            self._transition(BuildStatus.error(BUILD_FAILURE_MESSAGE))
        self._record("build", project, start, status="success" if success else "error")
        return success

    def _do_run(self, project: Project, sink: LogSink) -> None:
        start = time.perf_counter()
        was_running = self._strategy.is_running()
        try:
            self._strategy.stop()
            output = self._strategy.output_dir(project)
            if not output.is_dir() or not any(output.iterdir()):
                sink(NO_BUILD_MESSAGE)
                if was_running or self.status.state is BuildState.RUNNING:
                    self._transition(BuildStatus.idle())
                self._record("run", project, start, status="skipped")
                return
            sink("Starting local web server...")
            self._strategy.serve(project, sink)
        except Exception as exc:  # noqa: BLE001 - every failure ends in Error status
            message = str(exc) or exc.__class__.__name__
            sink(f"Run error: {message}")
            self._transition(BuildStatus.error(message))
            self._record("run", project, start, status="error", error=message)
            return
        self._transition(BuildStatus.running())
        address = self._strategy.address()
        if address:
            sink(f"Server running at {address}")
        self._record("run", project, start, status="success")

    def _do_stop(self) -> None:
        start = time.perf_counter()
        self._strategy.stop()
        self._transition(BuildStatus.idle())
        self.emit("Server stopped")
        self._record("stop", None, start, status="success")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _sink(self, on_log: LogSink | None) -> LogSink:
        if on_log is None:
            return self.emit

        def _both(line: str) -> None:
            self.emit(line)
            on_log(line)

        return _both

    def _transition(self, status: BuildStatus) -> None:
        with self._lock:
            self._status = status
            self._log_queue.put(_Publish(status))

    def _publish(self) -> None:
        with self._lock:
            observers = list(self._observers)
            snapshot = OrchestratorSnapshot(self._published_status, "".join(self._log_parts))
        if not observers:
            return
        for observer in observers:
            try:
                observer(snapshot)
            except Exception as exc:  # noqa: BLE001 - a broken observer is dropped, not fatal
                with self._lock:
                    if observer in self._observers:
                        self._observers.remove(observer)
                self._record_safely(
                    "orchestrator.observer",
                    level="error",
                    status="error",
                    component="orchestrator",
                    payload={"error": str(exc)},
                )

    def _collect_log(self) -> None:
        while True:
            item = self._log_queue.get()
            try:
                if item is None:
                    return
                if isinstance(item, _Publish):
                    if item.status is not None:
                        self._published_status = item.status
                else:
                    with self._lock:
                        self._log_parts.append(item + "\n")
                self._publish()
            finally:
                self._log_queue.task_done()

    def _record(
        self,
        event: str,
        project: Project | None,
        start: float,
        *,
        status: str,
        error: str | None = None,
    ) -> None:
        payload: dict[str, object] = {"strategy": self._strategy.name}
        if project is not None:
            payload["project"] = str(project.root)
        if error:
            payload["error"] = error
        self._record_safely(
            event,
            status=status,
            level="error" if status == "error" else "info",
            component="orchestrator",
            duration_ms=(time.perf_counter() - start) * 1000,
            payload=payload,
        )

    def _record_safely(self, event: str, **fields: Any) -> None:
        """Record telemetry; a failure to record is logged and never changes the outcome."""

        try:
            record_structured_event(self._settings, event, **fields)
        except TelemetryError as exc:
            self.emit(f"Telemetry unavailable: {exc}")


__all__ = [
    "BUILD_FAILURE_MESSAGE",
    "BUILD_SUCCESS_MESSAGE",
    "BuildOrchestrator",
    "NO_BUILD_MESSAGE",
    "OrchestratorSnapshot",
]
