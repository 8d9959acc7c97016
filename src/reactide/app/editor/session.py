"""Editor session: the open project, its file tree and the file being edited."""

from __future__ import annotations

import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from reactide.app.workspace.service import ProjectWorkspaceService
from reactide.domain.file_tree import FileNode
from reactide.domain.project import Project
from reactide.ports.build_strategy import LogSink


@dataclass(frozen=True)
class EditorSnapshot:
    project: Optional[Project] = None
    tree: tuple[FileNode, ...] = field(default_factory=tuple)
    current_file: Optional[Path] = None
    content: str = ""


Observer = Callable[[EditorSnapshot], None]


class EditorSession:
    """Runs file operations on a background worker and publishes snapshots.

    The worker is the only writer of session state. Messages such as
    "File saved: App.tsx" go to ``on_log`` (typically the orchestrator log).
    """

    def __init__(
        self,
        workspace: ProjectWorkspaceService,
        *,
        on_log: LogSink | None = None,
        executor: Executor | None = None,
    ) -> None:
        self._workspace = workspace
        self._on_log = on_log or (lambda _line: None)
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="reactide-editor")
        self._state = EditorSnapshot()
        self._observers: List[Observer] = []
        self._lock = threading.Lock()

    @property
    def snapshot(self) -> EditorSnapshot:
        with self._lock:
            return self._state

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        with self._lock:
            self._observers.append(observer)

        def _unsubscribe() -> None:
            with self._lock:
                if observer in self._observers:
                    self._observers.remove(observer)

        return _unsubscribe

    def open_project(self, project: Project) -> "Future[EditorSnapshot]":
        return self._executor.submit(self._open_project, project)

    def refresh_tree(self) -> "Future[EditorSnapshot]":
        return self._executor.submit(self._refresh_tree)

    def open_file(self, path: Path) -> "Future[EditorSnapshot]":
        return self._executor.submit(self._open_file, path)

    def save_file(self, content: str) -> "Future[EditorSnapshot]":
        return self._executor.submit(self._save_file, content)

    def create_file(self, relative: str) -> "Future[Path]":
        return self._executor.submit(self._create_file, relative)

    def delete_file(self, path: Path) -> "Future[EditorSnapshot]":
        return self._executor.submit(self._delete_file, path)

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    # ------------------------------------------------------------------
    # Worker side
    # ------------------------------------------------------------------

    def _open_project(self, project: Project) -> EditorSnapshot:
        tree = tuple(self._workspace.get_file_tree(project))
        return self._update(EditorSnapshot(project=project, tree=tree))

    def _refresh_tree(self) -> EditorSnapshot:
        state = self.snapshot
        if state.project is None:
            return state
        tree = tuple(self._workspace.get_file_tree(state.project))
        return self._update(EditorSnapshot(state.project, tree, state.current_file, state.content))

    def _open_file(self, path: Path) -> EditorSnapshot:
        content = self._workspace.read_file(path)
        state = self.snapshot
        return self._update(EditorSnapshot(state.project, state.tree, path, content))

    def _save_file(self, content: str) -> EditorSnapshot:
        state = self.snapshot
        if state.current_file is None:
            raise RuntimeError("no file is open")
        self._workspace.write_file(state.current_file, content)
        self._on_log(f"File saved: {state.current_file.name}")
        return self._update(EditorSnapshot(state.project, state.tree, state.current_file, content))

    def _create_file(self, relative: str) -> Path:
        state = self.snapshot
        if state.project is None:
            raise RuntimeError("no project is open")
        created = self._workspace.create_file(state.project, relative)
        self._refresh_tree()
        return created

    def _delete_file(self, path: Path) -> EditorSnapshot:
        self._workspace.delete_file(path)
        state = self._refresh_tree()
        current = state.current_file
        if current is not None and (current == path or path in current.parents):
            state = self._update(EditorSnapshot(state.project, state.tree, None, ""))
        return state

    def _update(self, state: EditorSnapshot) -> EditorSnapshot:
        with self._lock:
            self._state = state
            observers = list(self._observers)
        for observer in observers:
            observer(state)
        return state


__all__ = ["EditorSession", "EditorSnapshot"]
