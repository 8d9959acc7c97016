"""Port definition for pluggable build/run strategies."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable

from reactide.domain.project import Project

LogSink = Callable[[str], None]


class BuildStrategy(ABC):
    """Builds a project and serves its output; owns its server/process handle."""

    name: str = "strategy"

    @abstractmethod
    def build(self, project: Project, on_log: LogSink) -> bool:
        """Build ``project``; return True on success."""

    @abstractmethod
    def serve(self, project: Project, on_log: LogSink) -> None:
        """Start serving ``project``; raise on failure."""

    @abstractmethod
    def stop(self) -> None:
        """Tear down any active server or process. Safe when idle."""

    @abstractmethod
    def is_running(self) -> bool:
        """Report whether a server or process is currently active."""

    @abstractmethod
    def output_dir(self, project: Project) -> Path:
        """Directory holding the build output for ``project``."""

    def address(self) -> str | None:
        return None
