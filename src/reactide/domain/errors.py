"""Error taxonomy shared by the build-and-serve pipeline."""

from __future__ import annotations


class ProjectValidationError(ValueError):
    """Raised when a project cannot be created or imported as requested."""


class ProjectIOError(RuntimeError):
    """Raised when project files or directories are missing or unreadable."""


class ToolchainProcessError(RuntimeError):
    """Raised when an external command is empty or cannot be spawned.

    A command that runs and exits non-zero is not an error here; its exit code
    is returned to the caller.
    """

    def __init__(self, message: str, *, argv: list[str] | None = None) -> None:
        super().__init__(message)
        self.argv = list(argv or [])


class PathNotFoundError(LookupError):
    """Raised when a requested path is missing or escapes its sandbox root."""


__all__ = [
    "PathNotFoundError",
    "ProjectIOError",
    "ProjectValidationError",
    "ToolchainProcessError",
]
