"""Target adapter registry keyed by target id."""

from __future__ import annotations

from dataclasses import dataclass, field

from iconoma.errors import AdapterNotFoundError
from iconoma.targets.base import TargetAdapter


@dataclass(slots=True)
class TargetRegistry:
    """Adapters in deterministic registration order; later registrations replace earlier ones."""

    _adapters: dict[str, TargetAdapter] = field(default_factory=dict)

    def register(self, adapter: TargetAdapter) -> None:
        self._adapters[adapter.target_id] = adapter

    def resolve(self, target_id: str) -> TargetAdapter:
        adapter = self._adapters.get(target_id)
        if adapter is None:
            raise AdapterNotFoundError(target_id)
        return adapter

    def ids(self) -> tuple[str, ...]:
        """Return registered target ids in deterministic order."""
        return tuple(self._adapters.keys())
