"""Project workspace: create, import and list projects and edit their files."""

from __future__ import annotations

import shutil
import sys
import time
from pathlib import Path
from typing import Any, Callable, List

from reactide.adapters.json_project_registry import JsonProjectRegistry
from reactide.domain.errors import PathNotFoundError, ProjectIOError, ProjectValidationError
from reactide.domain.file_tree import FileNode, build_file_tree
from reactide.domain.project import PACKAGE_MANIFEST, SOURCE_DIR, Project
from reactide.ports.project_registry import ProjectRegistry
from reactide.settings import RuntimeSettings
from reactide.utils.telemetry import TelemetryError, record_structured_event

from .scaffold import scaffold_project

LogSink = Callable[[str], None]


def _stderr_line(line: str) -> None:
    print(line, file=sys.stderr)


def validate_project_name(name: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise ProjectValidationError("Project name must not be empty")
    if cleaned in {".", ".."} or cleaned.startswith("."):
        raise ProjectValidationError(f"Invalid project name '{name}'")
    if "/" in cleaned or "\\" in cleaned or "\x00" in cleaned:
        raise ProjectValidationError(f"Project name must not contain path separators: '{name}'")
    return cleaned


class ProjectWorkspaceService:
    """Owns the project registry and the files of registered projects."""

    def __init__(
        self,
        settings: RuntimeSettings,
        registry: ProjectRegistry | None = None,
        on_log: LogSink | None = None,
    ) -> None:
        self._settings = settings
        self._registry = registry or JsonProjectRegistry(settings.project_registry_file)
        self._log = on_log or _stderr_line

    @property
    def registry(self) -> ProjectRegistry:
        return self._registry

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def list_projects(self) -> List[Project]:
        return self._registry.list()

    def find_project(self, name: str) -> Project:
        """Return the most recently registered project called ``name``."""

        for project in reversed(self._registry.list()):
            if project.name == name:
                return project
        raise ProjectValidationError(f"Project '{name}' is not registered")

    def create_project(self, name: str) -> Project:
        name = validate_project_name(name)
        start = time.perf_counter()
        destination = self._settings.projects_dir / name
        if destination.exists():
            raise ProjectValidationError("Project already exists")
        destination.mkdir(parents=True)
        try:
            scaffold_project(destination, name)
        except OSError as exc:
            shutil.rmtree(destination, ignore_errors=True)
            raise ProjectIOError(f"Failed to scaffold project '{name}': {exc}") from exc
        project = Project(name=name, path=destination.resolve())
        self._registry.append(project)
        self._record(
            "project.create",
            status="success",
            component="workspace",
            duration_ms=(time.perf_counter() - start) * 1000,
            payload={"name": name, "path": str(project.path)},
        )
        return project

    def import_project(self, path: Path | str) -> Project:
        root = Path(path).expanduser()
        if not root.is_dir():
            raise ProjectValidationError(f"Invalid project path: {root}")
        if not (root / PACKAGE_MANIFEST).is_file() and not (root / SOURCE_DIR).is_dir():
            raise ProjectValidationError(f"Not a project directory (no {PACKAGE_MANIFEST} or {SOURCE_DIR}/): {root}")
        root = root.resolve()
        project = Project(name=root.name, path=root)
        self._registry.append(project)
        self._record(
            "project.import",
            status="success",
            component="workspace",
            payload={"name": project.name, "path": str(root)},
        )
        return project

    def get_file_tree(self, project: Project) -> List[FileNode]:
        return build_file_tree(project.root)

    def _record(self, event: str, **fields: Any) -> None:
        try:
            record_structured_event(self._settings, event, **fields)
        except TelemetryError as exc:
            self._log(f"Telemetry unavailable: {exc}")

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def read_file(self, path: Path) -> str:
        if not path.is_file():
            raise PathNotFoundError(str(path))
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ProjectIOError(f"Cannot read {path}: {exc}") from exc

    def write_file(self, path: Path, content: str) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise ProjectIOError(f"Cannot write {path}: {exc}") from exc

    def create_file(self, project: Project, relative: str) -> Path:
        """Create an empty file under the project's ``src/`` directory."""

        src_dir = project.src_dir.resolve()
        target = (project.src_dir / relative).resolve()
        if target == src_dir or src_dir not in target.parents:
            raise ProjectValidationError(f"File must live under {SOURCE_DIR}/: {relative}")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.touch(exist_ok=True)
        return target

    def delete_file(self, path: Path) -> None:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        elif path.exists() or path.is_symlink():
            path.unlink()
        else:
            raise PathNotFoundError(str(path))


__all__ = ["ProjectWorkspaceService", "validate_project_name"]
