"""Tool registration and argument helpers."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

ToolHandler = Callable[[dict[str, object]], dict[str, object]]


@dataclass(slots=True, frozen=True)
class ToolDispatchError(Exception):
    """Request-level failure reported with a stable error code."""

    code: str
    message: str


@dataclass(slots=True)
class ToolRegistry:
    """Named tool handlers in registration order."""

    _handlers: dict[str, ToolHandler] = field(default_factory=dict)

    def register(self, name: str, handler: ToolHandler) -> None:
        self._handlers[name] = handler

    def get(self, name: str) -> ToolHandler | None:
        return self._handlers.get(name)

    def names(self) -> tuple[str, ...]:
        return tuple(self._handlers.keys())

    def dispatch(self, name: str, arguments: dict[str, object]) -> dict[str, object]:
        handler = self.get(name)
        if handler is None:
            raise ToolDispatchError(code="UNKNOWN_TOOL", message=f"Unknown tool: {name}")
        return handler(arguments)


def require_object(arguments: dict[str, object], key: str, tool: str) -> dict[str, object]:
    value = arguments.get(key)
    if not isinstance(value, dict):
        raise ToolDispatchError(code="INVALID_PARAMS", message=f"{tool} {key} must be an object.")
    return value


def require_positive_int(arguments: dict[str, object], key: str, tool: str) -> int:
    value = arguments.get(key)
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ToolDispatchError(
            code="INVALID_PARAMS", message=f"{tool} {key} must be a positive integer."
        )
    return value
