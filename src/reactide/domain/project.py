"""Domain model for reactide projects and their optional descriptor."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator

from .errors import ProjectValidationError

PROJECT_DESCRIPTOR = "reactide.yaml"
SOURCE_DIR = "src"
PUBLIC_DIR = "public"
DEFAULT_OUTPUT_DIR = "dist"
PACKAGE_MANIFEST = "package.json"

DEFAULT_TOOLCHAIN: dict[str, list[str]] = {
    "install": ["npm", "install"],
    "build": ["npm", "run", "build"],
    "dev": ["npm", "run", "dev"],
}

_SCHEMA_PACKAGE = "reactide.resources"
_DESCRIPTOR_SCHEMA = "project_descriptor.schema.json"


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class Project:
    """A project record: a named source tree on disk."""

    name: str
    path: Path
    created_at: int = field(default_factory=_now_ms)
    last_modified: int = field(default_factory=_now_ms)

    @property
    def root(self) -> Path:
        return Path(self.path)

    @property
    def src_dir(self) -> Path:
        return self.root / SOURCE_DIR

    @property
    def public_dir(self) -> Path:
        return self.root / PUBLIC_DIR

    @property
    def package_json(self) -> Path:
        return self.root / PACKAGE_MANIFEST

    def exists(self) -> bool:
        return self.root.is_dir()

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "path": str(self.path),
            "createdAt": self.created_at,
            "lastModified": self.last_modified,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Project":
        now = _now_ms()
        return cls(
            name=data["name"],
            path=Path(data["path"]),
            created_at=int(data.get("createdAt", now)),
            last_modified=int(data.get("lastModified", now)),
        )


@dataclass(frozen=True)
class ToolchainCommands:
    install: list[str]
    build: list[str]
    dev: list[str]


@dataclass(frozen=True)
class ProjectDescriptor:
    """Settings read from ``reactide.yaml`` in a project root."""

    strategy: str | None = None
    output_dir: str = DEFAULT_OUTPUT_DIR
    toolchain: ToolchainCommands = field(
        default_factory=lambda: ToolchainCommands(**{key: list(value) for key, value in DEFAULT_TOOLCHAIN.items()})
    )

    @classmethod
    def load(cls, root: Path) -> "ProjectDescriptor":
        path = root / PROJECT_DESCRIPTOR
        if not path.exists():
            return cls()
        try:
            data = yaml.safe_load(path.read_text("utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ProjectValidationError(f"{PROJECT_DESCRIPTOR} is not valid YAML: {exc}") from exc
        errors = [
            f"{'.'.join(str(part) for part in error.absolute_path) or '<root>'}: {error.message}"
            for error in _descriptor_validator().iter_errors(data)
        ]
        if errors:
            raise ProjectValidationError(f"Invalid {PROJECT_DESCRIPTOR}: " + "; ".join(errors))
        output_dir = data.get("output_dir", DEFAULT_OUTPUT_DIR)
        if Path(output_dir).is_absolute():
            raise ProjectValidationError(f"output_dir must be relative to the project root: {output_dir}")
        check_output_dir(root, root / output_dir)
        commands = dict(DEFAULT_TOOLCHAIN)
        commands.update(data.get("toolchain", {}))
        return cls(
            strategy=data.get("strategy"),
            output_dir=output_dir,
            toolchain=ToolchainCommands(
                install=list(commands["install"]),
                build=list(commands["build"]),
                dev=list(commands["dev"]),
            ),
        )


@lru_cache(maxsize=1)
def _descriptor_validator() -> Draft202012Validator:
    resource = resources.files(_SCHEMA_PACKAGE) / _DESCRIPTOR_SCHEMA
    with resource.open("r", encoding="utf-8") as handle:
        return Draft202012Validator(json.load(handle))


def check_output_dir(root: Path, output_dir: Path) -> Path:
    """Return ``output_dir`` resolved, or raise if a rebuild could delete project sources.

    The directory is wiped before every build, so it must sit strictly inside
    ``root`` and must neither hold nor live under the source or public trees.
    """
    base = Path(root).resolve()
    target = Path(output_dir)
    if not target.is_absolute():
        target = base / target
    target = target.resolve()
    if target == base or base not in target.parents:
        raise ProjectValidationError(f"output_dir must be a directory inside the project: {output_dir}")
    for reserved in (SOURCE_DIR, PUBLIC_DIR):
        protected = (base / reserved).resolve()
        if target == protected or protected in target.parents or target in protected.parents:
            raise ProjectValidationError(f"output_dir must not overlap {reserved}/: {output_dir}")
    return target


def output_dir_for(project: Project) -> Path:
    return project.root / ProjectDescriptor.load(project.root).output_dir


__all__ = [
    "DEFAULT_OUTPUT_DIR",
    "DEFAULT_TOOLCHAIN",
    "PACKAGE_MANIFEST",
    "PROJECT_DESCRIPTOR",
    "PUBLIC_DIR",
    "Project",
    "ProjectDescriptor",
    "SOURCE_DIR",
    "ToolchainCommands",
    "check_output_dir",
    "output_dir_for",
]
