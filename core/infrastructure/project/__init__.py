"""Working copy access."""
from .git_project_loader import GitProjectLoader

__all__ = ["GitProjectLoader"]
