"""Target adapter protocol."""

from __future__ import annotations

from typing import Protocol

from iconoma.store.models import Icon


class TargetAdapter(Protocol):
    """Emits and removes the platform artifact of one icon for one target id."""

    target_id: str

    def add_icon(self, icon: Icon, icon_key: str, file_path: str) -> None:
        """Write the artifact for ``icon`` at the project-relative ``file_path``."""

    def remove_icon(self, icon: Icon, icon_key: str, file_path: str) -> None:
        """Delete the artifact previously written at ``file_path``."""
