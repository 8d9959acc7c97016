from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest

from reactide.app.editor import EditorSession, EditorSnapshot
from reactide.app.workspace import ProjectWorkspaceService
from reactide.domain.project import Project
from reactide.settings import RuntimeSettings


@pytest.fixture()
def workspace(runtime_settings: RuntimeSettings) -> ProjectWorkspaceService:
    return ProjectWorkspaceService(runtime_settings)


@pytest.fixture()
def project(workspace: ProjectWorkspaceService) -> Project:
    return workspace.create_project("editor")


@pytest.fixture()
def session_and_log(workspace: ProjectWorkspaceService) -> Iterator[tuple[EditorSession, list[str]]]:
    lines: list[str] = []
    session = EditorSession(workspace, on_log=lines.append)
    try:
        yield session, lines
    finally:
        session.close()


def test_open_project_publishes_tree(session_and_log, project: Project) -> None:
    session, _ = session_and_log
    seen: list[EditorSnapshot] = []
    session.subscribe(seen.append)
    snapshot = session.open_project(project).result(timeout=10)
    assert snapshot.project == project
    assert [node.name for node in snapshot.tree][:2] == ["public", "src"]
    assert seen[-1] == snapshot


def test_open_and_save_file(session_and_log, project: Project) -> None:
    session, lines = session_and_log
    session.open_project(project).result(timeout=10)
    target = project.src_dir / "App.tsx"
    opened = session.open_file(target).result(timeout=10)
    assert opened.current_file == target
    assert "function App()" in opened.content
    saved = session.save_file("export default 1;\n").result(timeout=10)
    assert saved.content == "export default 1;\n"
    assert target.read_text(encoding="utf-8") == "export default 1;\n"
    assert lines == ["File saved: App.tsx"]


def test_save_without_open_file_fails(session_and_log) -> None:
    session, _ = session_and_log
    with pytest.raises(RuntimeError):
        session.save_file("x").result(timeout=10)


def test_create_and_delete_refresh_tree(session_and_log, project: Project) -> None:
    session, _ = session_and_log
    session.open_project(project).result(timeout=10)
    created = session.create_file("hooks/useThing.ts").result(timeout=10)
    src = next(node for node in session.snapshot.tree if node.name == "src")
    assert "hooks" in [child.name for child in src.children]

    session.open_file(created).result(timeout=10)
    after = session.delete_file(created.parent).result(timeout=10)
    src = next(node for node in after.tree if node.name == "src")
    assert "hooks" not in [child.name for child in src.children]
    assert after.current_file is None
    assert after.content == ""


def test_delete_other_file_keeps_current(session_and_log, project: Project) -> None:
    session, _ = session_and_log
    session.open_project(project).result(timeout=10)
    current = project.src_dir / "main.tsx"
    session.open_file(current).result(timeout=10)
    after = session.delete_file(project.src_dir / "App.css").result(timeout=10)
    assert after.current_file == current
    assert not Path(project.src_dir / "App.css").exists()
