"""Point-in-time snapshots of a project directory tree."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

IGNORED_NAMES = frozenset({"node_modules", "build", "dist"})


@dataclass(frozen=True)
class FileNode:
    name: str
    path: Path
    is_directory: bool
    children: tuple["FileNode", ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "name": self.name,
            "path": str(self.path),
            "isDirectory": self.is_directory,
        }
        if self.is_directory:
            payload["children"] = [child.to_dict() for child in self.children]
        return payload


def _visible(entry: Path) -> bool:
    return not entry.name.startswith(".") and entry.name not in IGNORED_NAMES


def build_file_tree(root: Path) -> list[FileNode]:
    """Return the ordered forest under ``root``: directories first, then by name.

    Hidden entries and build artifacts are skipped. Symlinked directories are
    listed but not descended into.
    """

    if not root.is_dir():
        return []
    entries = sorted(
        (entry for entry in root.iterdir() if _visible(entry)),
        key=lambda entry: (not entry.is_dir(), entry.name),
    )
    nodes: list[FileNode] = []
    for entry in entries:
        is_dir = entry.is_dir()
        children: tuple[FileNode, ...] = ()
        if is_dir and not entry.is_symlink():
            children = tuple(build_file_tree(entry))
        nodes.append(FileNode(entry.name, entry.absolute(), is_dir, children))
    return nodes


def iter_files(nodes: list[FileNode]) -> list[FileNode]:
    files: list[FileNode] = []
    for node in nodes:
        if node.is_directory:
            files.extend(iter_files(list(node.children)))
        else:
            files.append(node)
    return files


__all__ = ["FileNode", "IGNORED_NAMES", "build_file_tree", "iter_files"]
