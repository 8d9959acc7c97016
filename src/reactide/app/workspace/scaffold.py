"""Writes the starter React + TypeScript tree for a new project."""

from __future__ import annotations

import re
from importlib import resources
from pathlib import Path
from string import Template
from typing import Any, List

from reactide.domain.project import DEFAULT_OUTPUT_DIR

TEMPLATE_PACKAGE = "reactide.resources"
DEFAULT_TEMPLATE = "react-ts"


def package_name_for(name: str) -> str:
    slug = re.sub(r"\s+", "-", name.strip().lower())
    return slug or "app"


def _walk(node: Any, prefix: Path) -> List[tuple[Path, Any]]:
    files: List[tuple[Path, Any]] = []
    for child in sorted(node.iterdir(), key=lambda item: item.name):
        if child.name.startswith("__") or child.name.endswith(".pyc"):
            continue
        relative = prefix / child.name
        if child.is_dir():
            files.extend(_walk(child, relative))
        else:
            files.append((relative, child))
    return files


def scaffold_project(destination: Path, name: str, *, template: str = DEFAULT_TEMPLATE) -> List[Path]:
    """Render the template into ``destination`` and return the written files.

    ``${name}`` and ``${package_name}`` are substituted in every file. An empty
    output directory is created alongside.
    """

    root = resources.files(TEMPLATE_PACKAGE) / "templates" / template
    if not root.is_dir():
        raise FileNotFoundError(f"project template '{template}' not found")
    context = {"name": name, "package_name": package_name_for(name)}
    written: List[Path] = []
    for relative, source in _walk(root, Path()):
        target = destination / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        text = Template(source.read_text(encoding="utf-8")).safe_substitute(context)
        target.write_text(text, encoding="utf-8")
        written.append(target)
    (destination / DEFAULT_OUTPUT_DIR).mkdir(parents=True, exist_ok=True)
    return written


__all__ = ["DEFAULT_TEMPLATE", "package_name_for", "scaffold_project"]
