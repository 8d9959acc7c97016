"""Domain exports."""

from .build_status import BuildState, BuildStatus
from .errors import PathNotFoundError, ProjectIOError, ProjectValidationError, ToolchainProcessError
from .file_tree import FileNode, build_file_tree
from .project import Project, ProjectDescriptor, ToolchainCommands

__all__ = [
    "BuildState",
    "BuildStatus",
    "FileNode",
    "PathNotFoundError",
    "Project",
    "ProjectDescriptor",
    "ProjectIOError",
    "ProjectValidationError",
    "ToolchainCommands",
    "ToolchainProcessError",
    "build_file_tree",
]
