"""Path resolution helpers for project-scoped file access."""

from __future__ import annotations

import re
from pathlib import Path, PurePosixPath
from typing import Final

WINDOWS_ABSOLUTE_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[a-zA-Z]:[\\/]")


class PathBlockedError(Exception):
    """Raised when a requested path escapes the project root."""

    def __init__(self, reason: str, hint: str) -> None:
        super().__init__(reason)
        self.reason = reason
        self.hint = hint


def _normalize_relative_input(candidate: str) -> tuple[str, bool]:
    """Normalize path separators and detect absolute-style inputs."""
    normalized = candidate.replace("\\", "/")
    if normalized.startswith("/"):
        return normalized, True
    if WINDOWS_ABSOLUTE_PATTERN.match(normalized):
        return normalized, True
    return normalized, False


def resolve_project_path(project_root: Path, candidate: str) -> Path:
    """Resolve a project-relative path (svg folder, target output) with sandboxing."""
    root = project_root.resolve()
    normalized, is_absolute_style = _normalize_relative_input(candidate)

    if not normalized:
        raise PathBlockedError(
            reason="Path is empty.",
            hint="Provide a project-relative path such as 'icons/home.svg'.",
        )

    if is_absolute_style:
        resolved_absolute = Path(normalized).resolve(strict=False)
        if not resolved_absolute.is_relative_to(root):
            raise PathBlockedError(
                reason="Absolute path is outside the project root.",
                hint="Use a path located under the project root.",
            )
        return resolved_absolute

    parts = [part for part in normalized.split("/") if part not in ("", ".")]
    if any(part == ".." for part in parts):
        raise PathBlockedError(
            reason="Path traversal is blocked.",
            hint="Remove '..' segments and use a project-relative path.",
        )
    if not parts:
        raise PathBlockedError(
            reason="Path resolves to the project root itself.",
            hint="Provide a file path below the project root.",
        )

    resolved = (root / Path(*parts)).resolve(strict=False)
    if not resolved.is_relative_to(root):
        raise PathBlockedError(
            reason="Resolved path escapes the project root.",
            hint="Use a path located under the project root.",
        )
    return resolved


def join_project_path(folder: str, file_name: str) -> str:
    """Join a configured folder and a file name into a normalized relative path."""
    return (PurePosixPath(folder.replace("\\", "/")) / file_name).as_posix()


def remove_empty_parent(path: Path, project_root: Path) -> bool:
    """Remove the parent directory of ``path`` when it is empty; never the root itself."""
    folder = path.parent
    if folder.resolve() == project_root.resolve():
        return False
    try:
        next(folder.iterdir())
    except StopIteration:
        pass
    except OSError:
        return False
    else:
        return False
    try:
        folder.rmdir()
    except OSError:
        return False
    return True
