#!/usr/bin/env python3
"""Entry point for the reactide CLI."""

from __future__ import annotations

import argparse
import json
import sys
import time
from pathlib import Path
from typing import Iterable

from reactide import __version__
from reactide.app.build import BuildOrchestrator, strategy_for
from reactide.app.workspace import ProjectWorkspaceService
from reactide.domain.build_status import BuildState
from reactide.domain.errors import ProjectIOError, ProjectValidationError
from reactide.domain.file_tree import FileNode
from reactide.domain.project import Project
from reactide.settings import SETTINGS, STRATEGY_CHOICES
from reactide.utils.telemetry import clear as telemetry_clear
from reactide.utils.telemetry import iter_events as telemetry_iter
from reactide.utils.telemetry import summarize as telemetry_summarize

HELP_OVERVIEW = """reactide: bundle and preview small React + TypeScript projects.

Typical flow:
  reactide create demo
  reactide build demo
  reactide run demo
"""

POLL_INTERVAL_SECONDS = 0.5


def _workspace() -> ProjectWorkspaceService:
    return ProjectWorkspaceService(SETTINGS)


def _resolve_project(name: str) -> Project | None:
    try:
        project = _workspace().find_project(name)
    except ProjectValidationError as exc:
        print(str(exc), file=sys.stderr)
        return None
    if not project.exists():
        print(f"Project directory missing: {project.root}", file=sys.stderr)
        return None
    return project


def _print_tree(nodes: Iterable[FileNode], indent: int = 0) -> None:
    for node in nodes:
        suffix = "/" if node.is_directory else ""
        print(f"{'  ' * indent}{node.name}{suffix}")
        if node.is_directory:
            _print_tree(node.children, indent + 1)


def _create_cmd(args: argparse.Namespace) -> int:
    try:
        project = _workspace().create_project(args.name)
    except (ProjectValidationError, ProjectIOError) as exc:
        print(f"Error creating project: {exc}", file=sys.stderr)
        return 1
    print(f"Created project '{project.name}' at {project.root}")
    return 0


def _import_cmd(args: argparse.Namespace) -> int:
    try:
        project = _workspace().import_project(Path(args.path))
    except ProjectValidationError as exc:
        print(f"Error importing project: {exc}", file=sys.stderr)
        return 1
    print(f"Imported project '{project.name}' from {project.root}")
    return 0


def _list_cmd(args: argparse.Namespace) -> int:
    projects = _workspace().list_projects()
    if args.json:
        print(json.dumps([project.to_dict() for project in projects], indent=2, ensure_ascii=False))
        return 0
    if not projects:
        print("No projects registered")
        return 0
    for project in projects:
        marker = "" if project.exists() else " (missing)"
        print(f"{project.name}\t{project.root}{marker}")
    return 0


def _tree_cmd(args: argparse.Namespace) -> int:
    project = _resolve_project(args.name)
    if project is None:
        return 1
    nodes = _workspace().get_file_tree(project)
    if args.json:
        print(json.dumps([node.to_dict() for node in nodes], indent=2, ensure_ascii=False))
    else:
        _print_tree(nodes)
    return 0


def _orchestrator_for(project: Project, args: argparse.Namespace) -> BuildOrchestrator | None:
    try:
        strategy = strategy_for(project, SETTINGS, override=args.strategy, port=getattr(args, "port", None))
    except (ProjectValidationError, ValueError) as exc:
        print(str(exc), file=sys.stderr)
        return None
    return BuildOrchestrator(strategy, settings=SETTINGS)


def _build_cmd(args: argparse.Namespace) -> int:
    project = _resolve_project(args.name)
    if project is None:
        return 1
    orchestrator = _orchestrator_for(project, args)
    if orchestrator is None:
        return 1
    try:
        success = orchestrator.build(project, on_log=print).result()
    finally:
        orchestrator.close()
    return 0 if success else 1


def _run_cmd(args: argparse.Namespace) -> int:
    project = _resolve_project(args.name)
    if project is None:
        return 1
    orchestrator = _orchestrator_for(project, args)
    if orchestrator is None:
        return 1
    try:
        if args.build and not orchestrator.build(project, on_log=print).result():
            return 1
        orchestrator.run(project, on_log=print).result()
        if orchestrator.status.state is not BuildState.RUNNING:
            return 1
        print("Press Ctrl+C to stop")
        try:
            while orchestrator.is_running():
                time.sleep(POLL_INTERVAL_SECONDS)
        except KeyboardInterrupt:
            pass
        orchestrator.stop().result()
        print("Server stopped")
        return 0
    finally:
        orchestrator.close()


def _telemetry_cmd(args: argparse.Namespace) -> int:
    if args.telemetry_command == "report":
        summary = telemetry_summarize(telemetry_iter(SETTINGS))
        print(json.dumps(summary, indent=2, ensure_ascii=False))
        return 0
    if args.telemetry_command == "clear":
        telemetry_clear(SETTINGS)
        print("Telemetry log cleared")
        return 0
    print("Unsupported telemetry command", file=sys.stderr)
    return 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="reactide",
        description=HELP_OVERVIEW,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"reactide {__version__}")

    sub = parser.add_subparsers(dest="command", required=True)

    create_cmd = sub.add_parser("create", help="Scaffold a new React + TypeScript project")
    create_cmd.add_argument("name", help="Project name (directory under the projects dir)")
    create_cmd.set_defaults(func=_create_cmd)

    import_cmd = sub.add_parser("import", help="Register an existing project directory")
    import_cmd.add_argument("path", help="Directory containing package.json or src/")
    import_cmd.set_defaults(func=_import_cmd)

    list_cmd = sub.add_parser("list", help="List registered projects")
    list_cmd.add_argument("--json", action="store_true", help="Emit the registry as JSON")
    list_cmd.set_defaults(func=_list_cmd)

    tree_cmd = sub.add_parser("tree", help="Print the project file tree")
    tree_cmd.add_argument("name")
    tree_cmd.add_argument("--json", action="store_true", help="Emit the tree as JSON")
    tree_cmd.set_defaults(func=_tree_cmd)

    build_cmd = sub.add_parser("build", help="Bundle a project into its output directory")
    build_cmd.add_argument("name")
    build_cmd.add_argument("--strategy", choices=STRATEGY_CHOICES, help="Override the build strategy")
    build_cmd.set_defaults(func=_build_cmd)

    run_cmd = sub.add_parser("run", help="Serve the build output until interrupted")
    run_cmd.add_argument("name")
    run_cmd.add_argument("--strategy", choices=STRATEGY_CHOICES, help="Override the build strategy")
    run_cmd.add_argument("--port", type=int, default=None, help=f"Server port (default: {SETTINGS.server_port})")
    run_cmd.add_argument("--build", action="store_true", help="Build before serving")
    run_cmd.set_defaults(func=_run_cmd)

    telemetry_cmd = sub.add_parser("telemetry", help="Inspect local telemetry")
    telemetry_sub = telemetry_cmd.add_subparsers(dest="telemetry_command", required=True)
    telemetry_sub.add_parser("report", help="Print aggregated telemetry stats")
    telemetry_sub.add_parser("clear", help="Remove telemetry log file")
    telemetry_cmd.set_defaults(func=_telemetry_cmd)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
