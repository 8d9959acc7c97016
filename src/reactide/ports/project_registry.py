"""Port definitions for project registry storage."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from reactide.domain.project import Project


class ProjectRegistry(ABC):
    @abstractmethod
    def list(self) -> List[Project]:
        """Return registered projects in insertion order."""

    @abstractmethod
    def append(self, project: Project) -> None:
        """Append a project record and persist the registry."""
