"""Filesystem layout for prototype projects."""

from pathlib import Path
from typing import Union

PROTOTYPE_DIR = "prototypes"


class ProjectPaths:
    """Resolves project-relative paths inside the prototypes directory."""

    def __init__(self, base_dir: Union[str, Path], prototypes_dir_name: str = PROTOTYPE_DIR):
        """
        Initialize the resolver.

        Args:
            base_dir: Application data directory
            prototypes_dir_name: Name of the directory holding all projects
        """
        self.base_dir = Path(base_dir).resolve()
        self.prototypes_dir = self.base_dir / prototypes_dir_name

    def project_root(self, project_id: str) -> Path:
        """Root directory of a single project."""
        if not project_id or Path(project_id).name != project_id or project_id in (".", ".."):
            raise ValueError(f"Invalid project id: {project_id!r}")
        return self.prototypes_dir / project_id

    def resolve(self, project_id: str, relative_path: str = "") -> Path:
        """
        Resolve a path relative to a project's root.

        Args:
            project_id: Project ID
            relative_path: Path inside the project (empty for the root itself)

        Returns:
            Absolute path inside the project

        Raises:
            ValueError: If the path is absolute or escapes the project root
        """
        root = self.project_root(project_id)
        if not relative_path:
            return root

        if Path(relative_path).is_absolute():
            raise ValueError(f"Path must be relative to the project: {relative_path}")

        resolved = (root / relative_path).resolve()
        if resolved != root.resolve() and root.resolve() not in resolved.parents:
            raise ValueError(f"Path escapes the project directory: {relative_path}")
        return resolved
