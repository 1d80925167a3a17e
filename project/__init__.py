"""Project sandbox path resolution."""

from .paths import ProjectPaths, PROTOTYPE_DIR

__all__ = ["ProjectPaths", "PROTOTYPE_DIR"]
