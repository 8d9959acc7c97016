"""JSON file persistence for the project registry."""

from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import List

from jsonschema import Draft202012Validator

from reactide.domain.project import Project
from reactide.ports.project_registry import ProjectRegistry

_RECORD_SCHEMA = "project_record.schema.json"


@lru_cache(maxsize=1)
def _record_validator() -> Draft202012Validator:
    resource = resources.files("reactide.resources") / _RECORD_SCHEMA
    with resource.open("r", encoding="utf-8") as handle:
        return Draft202012Validator(json.load(handle))


class JsonProjectRegistry(ProjectRegistry):
    """Stores project records as one flat JSON array, rewritten on every mutation.

    A missing or unreadable file reads as an empty registry; records that do
    not match the schema are skipped. No locking against concurrent writers.
    """

    def __init__(self, registry_path: Path) -> None:
        self._path = registry_path

    @property
    def path(self) -> Path:
        return self._path

    def list(self) -> List[Project]:
        if not self._path.exists():
            return []
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return []
        if not isinstance(raw, list):
            return []
        validator = _record_validator()
        return [Project.from_dict(item) for item in raw if validator.is_valid(item)]

    def append(self, project: Project) -> None:
        self._persist(self.list() + [project])

    def _persist(self, projects: List[Project]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = [project.to_dict() for project in projects]
        self._path.write_text(json.dumps(payload, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")


__all__ = ["JsonProjectRegistry"]
