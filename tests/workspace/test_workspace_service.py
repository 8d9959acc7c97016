from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path

import pytest

from reactide.adapters.json_project_registry import JsonProjectRegistry
from reactide.app.workspace import ProjectWorkspaceService, package_name_for
from reactide.domain.errors import PathNotFoundError, ProjectValidationError
from reactide.settings import RuntimeSettings


@pytest.fixture()
def workspace(runtime_settings: RuntimeSettings) -> ProjectWorkspaceService:
    return ProjectWorkspaceService(runtime_settings)


def test_create_project_scaffolds_tree(workspace: ProjectWorkspaceService, runtime_settings: RuntimeSettings) -> None:
    project = workspace.create_project("My App")
    root = runtime_settings.projects_dir / "My App"
    assert project.root == root.resolve()
    for relative in (
        "package.json",
        "tsconfig.json",
        "README.md",
        "public/index.html",
        "src/App.tsx",
        "src/App.css",
        "src/main.tsx",
        "src/index.css",
    ):
        assert (root / relative).is_file(), relative
    assert (root / "dist").is_dir()
    manifest = json.loads((root / "package.json").read_text(encoding="utf-8"))
    assert manifest["name"] == "my-app"
    assert "<title>My App</title>" in (root / "public" / "index.html").read_text(encoding="utf-8")
    assert "Welcome to My App" in (root / "src" / "App.tsx").read_text(encoding="utf-8")


def test_create_registers_project(workspace: ProjectWorkspaceService, runtime_settings: RuntimeSettings) -> None:
    workspace.create_project("alpha")
    workspace.create_project("beta")
    assert [project.name for project in workspace.list_projects()] == ["alpha", "beta"]
    raw = json.loads(runtime_settings.project_registry_file.read_text(encoding="utf-8"))
    assert isinstance(raw, list)
    assert {"name", "path", "createdAt", "lastModified"} <= set(raw[0])


def test_create_existing_project_fails_without_registry_change(workspace: ProjectWorkspaceService) -> None:
    workspace.create_project("alpha")
    with pytest.raises(ProjectValidationError, match="Project already exists"):
        workspace.create_project("alpha")
    assert len(workspace.list_projects()) == 1


@pytest.mark.parametrize("name", ["", "   ", "..", ".hidden", "a/b", "a\\b"])
def test_invalid_project_names(workspace: ProjectWorkspaceService, name: str) -> None:
    with pytest.raises(ProjectValidationError):
        workspace.create_project(name)
    assert workspace.list_projects() == []


def test_import_requires_project_markers(workspace: ProjectWorkspaceService, tmp_path: Path) -> None:
    bare = tmp_path / "bare"
    bare.mkdir()
    with pytest.raises(ProjectValidationError):
        workspace.import_project(bare)
    with pytest.raises(ProjectValidationError):
        workspace.import_project(tmp_path / "missing")
    assert workspace.list_projects() == []


def test_import_registers_existing_directory(workspace: ProjectWorkspaceService, react_project: Path) -> None:
    project = workspace.import_project(react_project)
    assert project.name == "demo"
    assert workspace.find_project("demo").root == react_project.resolve()


def test_find_unknown_project(workspace: ProjectWorkspaceService) -> None:
    with pytest.raises(ProjectValidationError):
        workspace.find_project("nope")


def test_file_tree_skips_artifacts(workspace: ProjectWorkspaceService) -> None:
    project = workspace.create_project("tree")
    (project.root / "node_modules" / "react").mkdir(parents=True)
    (project.root / ".git").mkdir()
    nodes = workspace.get_file_tree(project)
    names = [node.name for node in nodes]
    assert names == ["public", "src", "README.md", "package.json", "tsconfig.json"]
    src = nodes[1]
    assert [child.name for child in src.children] == ["App.css", "App.tsx", "index.css", "main.tsx"]


def test_file_operations(workspace: ProjectWorkspaceService) -> None:
    project = workspace.create_project("files")
    created = workspace.create_file(project, "components/Button.tsx")
    assert created == (project.src_dir / "components" / "Button.tsx").resolve()
    assert workspace.read_file(created) == ""
    workspace.write_file(created, "export const Button = 1;\n")
    assert workspace.read_file(created) == "export const Button = 1;\n"
    workspace.delete_file(created.parent)
    assert not created.parent.exists()
    with pytest.raises(PathNotFoundError):
        workspace.delete_file(created.parent)
    with pytest.raises(PathNotFoundError):
        workspace.read_file(created)


def test_create_file_outside_src_is_rejected(workspace: ProjectWorkspaceService) -> None:
    project = workspace.create_project("escape")
    with pytest.raises(ProjectValidationError):
        workspace.create_file(project, "../package2.json")


def test_registry_tolerates_corrupt_file(tmp_path: Path) -> None:
    path = tmp_path / "projects.json"
    path.write_text("{not json", encoding="utf-8")
    registry = JsonProjectRegistry(path)
    assert registry.list() == []
    path.write_text(json.dumps([{"name": "ok", "path": "/tmp/ok"}, {"path": "/tmp/no-name"}, 7]), encoding="utf-8")
    assert [project.name for project in registry.list()] == ["ok"]


def test_package_name_slug() -> None:
    assert package_name_for("My  Cool App") == "my-cool-app"
    assert package_name_for("   ") == "app"


def test_project_operations_survive_unwritable_telemetry(
    runtime_settings: RuntimeSettings, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("REACTIDE_TELEMETRY", "1")
    blocker = tmp_path / "log-file"
    blocker.write_text("", encoding="utf-8")
    lines: list[str] = []
    workspace = ProjectWorkspaceService(replace(runtime_settings, log_dir=blocker), on_log=lines.append)
    created = workspace.create_project("demo")
    assert (created.root / "src" / "App.tsx").is_file()
    imported = workspace.import_project(created.root)
    assert [project.name for project in workspace.list_projects()] == ["demo", imported.name]
    assert len(lines) == 2
    assert all(line.startswith("Telemetry unavailable:") for line in lines)
