"""Built-in studio tools."""

from __future__ import annotations

from collections.abc import Callable

from iconoma.actions import Change, change_from_payload, change_to_payload
from iconoma.errors import NotFoundError
from iconoma.service import StudioService
from iconoma.store import Config
from iconoma.tools.registry import (
    ToolDispatchError,
    ToolHandler,
    ToolRegistry,
    require_object,
    require_positive_int,
)

DEFAULT_AUDIT_LIMIT = 50
MAX_AUDIT_LIMIT = 500


def register_builtin_tools(
    registry: ToolRegistry,
    service: StudioService,
    read_audit_entries: Callable[[str | None, int], list[dict[str, object]]],
) -> None:
    """Register the studio tool set in a fixed order."""
    registry.register("studio.status", _status_handler(service))
    registry.register("config.read", _config_read_handler(service))
    registry.register("config.diff", _config_diff_handler(service))
    registry.register("config.write", _config_write_handler(service))
    registry.register("actions.submit", _submit_handler(service))
    registry.register("actions.get", _get_handler(service))
    registry.register("actions.list", _list_handler(service))
    registry.register("icons.stale", _stale_handler(service))
    registry.register("studio.audit_log", _audit_log_handler(read_audit_entries))


def _status_handler(service: StudioService) -> ToolHandler:
    def handler(_: dict[str, object]) -> dict[str, object]:
        return service.status()

    return handler


def _config_read_handler(service: StudioService) -> ToolHandler:
    def handler(_: dict[str, object]) -> dict[str, object]:
        config = service.read_config()
        if config is None:
            return {"config": None, "config_hash": None}
        return {"config": config.to_payload(), "config_hash": config.config_hash()}

    return handler


def _config_diff_handler(service: StudioService) -> ToolHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        config = Config.from_payload(require_object(arguments, "config", "config.diff"))
        return {"changes": [change_to_payload(change) for change in service.diff(config)]}

    return handler


def _config_write_handler(service: StudioService) -> ToolHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        config = Config.from_payload(require_object(arguments, "config", "config.write"))
        raw_changes = arguments.get("changes")
        changes: list[Change]
        if raw_changes is None:
            changes = service.diff(config)
        elif isinstance(raw_changes, list):
            changes = [change_from_payload(item) for item in raw_changes]
        else:
            raise ToolDispatchError(
                code="INVALID_PARAMS", message="config.write changes must be a list."
            )
        action_ids = service.write_config(config, changes)
        return {"config_hash": config.config_hash(), "action_ids": action_ids}

    return handler


def _submit_handler(service: StudioService) -> ToolHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        change = change_from_payload(require_object(arguments, "change", "actions.submit"))
        return {"id": service.submit(change)}

    return handler


def _get_handler(service: StudioService) -> ToolHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        action_id = require_positive_int(arguments, "id", "actions.get")
        record = service.get(action_id)
        if record is None:
            raise NotFoundError(f"Action {action_id} not found.")
        return record.to_dict()

    return handler


def _list_handler(service: StudioService) -> ToolHandler:
    def handler(_: dict[str, object]) -> dict[str, object]:
        return {"actions": [record.to_dict() for record in service.list_all()]}

    return handler


def _stale_handler(service: StudioService) -> ToolHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        regenerate = arguments.get("regenerate", False)
        if not isinstance(regenerate, bool):
            raise ToolDispatchError(
                code="INVALID_PARAMS", message="icons.stale regenerate must be a boolean."
            )
        stale = [entry.to_dict() for entry in service.stale_targets()]
        if not regenerate:
            return {"stale": stale}
        return {"stale": stale, "action_ids": service.regenerate_stale()}

    return handler


def _audit_log_handler(
    read_audit_entries: Callable[[str | None, int], list[dict[str, object]]],
) -> ToolHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        since_value = arguments.get("since")
        limit_value = arguments.get("limit", DEFAULT_AUDIT_LIMIT)

        since: str | None = since_value if isinstance(since_value, str) else None
        limit = limit_value if isinstance(limit_value, int) else DEFAULT_AUDIT_LIMIT
        limit = max(1, min(limit, MAX_AUDIT_LIMIT))

        return {"entries": read_audit_entries(since, limit)}

    return handler
