"""External process execution."""
from .spawn import ErrorFinder, spawn_and_watch

__all__ = ["ErrorFinder", "spawn_and_watch"]
