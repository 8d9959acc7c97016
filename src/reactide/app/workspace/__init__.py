"""Project workspace services."""

from .scaffold import package_name_for, scaffold_project
from .service import ProjectWorkspaceService, validate_project_name

__all__ = ["ProjectWorkspaceService", "package_name_for", "scaffold_project", "validate_project_name"]
