"""Project-root sandboxing primitives."""

from .paths import PathBlockedError, join_project_path, remove_empty_parent, resolve_project_path

__all__ = [
    "PathBlockedError",
    "join_project_path",
    "remove_empty_parent",
    "resolve_project_path",
]
