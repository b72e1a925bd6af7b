"""Reconciliation instructions, one type per change kind."""

from __future__ import annotations

from dataclasses import dataclass, field

from iconoma.errors import ValidationError


@dataclass(slots=True, frozen=True)
class MigrateSvgToLock:
    """Inline a file-backed icon's markup into the lock and delete the file."""

    icon_key: str
    file_path: str
    type = "MIGRATE_SVG_TO_LOCK"


@dataclass(slots=True, frozen=True)
class MigrateSvgToFile:
    """Move a lock-backed icon's markup into a file under the svg folder."""

    icon_key: str
    file_path: str
    type = "MIGRATE_SVG_TO_FILE"


@dataclass(slots=True, frozen=True)
class AddExtraTarget:
    icon_key: str
    target_id: str
    file_path: str
    type = "ADD_EXTRA_TARGET"


@dataclass(slots=True, frozen=True)
class RemoveExtraTarget:
    icon_key: str
    target_id: str
    file_path: str
    type = "REMOVE_EXTRA_TARGET"


@dataclass(slots=True, frozen=True)
class CreateIcon:
    """Add or replace an icon from raw markup; fans out into one target per config entry."""

    name: str
    tags: tuple[str, ...]
    content: str
    color_map: dict[str, str] = field(default_factory=dict)
    type = "CREATE_ICON"


@dataclass(slots=True, frozen=True)
class RemoveIcon:
    icon_key: str
    type = "REMOVE_ICON"


@dataclass(slots=True, frozen=True)
class RegenerateIcon:
    icon_key: str
    type = "REGENERATE_ICON"


@dataclass(slots=True, frozen=True)
class RegenerateAll:
    type = "REGENERATE_ALL"


Change = (
    MigrateSvgToLock
    | MigrateSvgToFile
    | AddExtraTarget
    | RemoveExtraTarget
    | CreateIcon
    | RemoveIcon
    | RegenerateIcon
    | RegenerateAll
)

CHANGE_TYPES: tuple[str, ...] = (
    "MIGRATE_SVG_TO_LOCK",
    "MIGRATE_SVG_TO_FILE",
    "ADD_EXTRA_TARGET",
    "REMOVE_EXTRA_TARGET",
    "CREATE_ICON",
    "REMOVE_ICON",
    "REGENERATE_ICON",
    "REGENERATE_ALL",
)


def change_to_payload(change: Change) -> dict[str, object]:
    """Return the JSON wire form of a change."""
    payload: dict[str, object] = {"type": change.type}
    if isinstance(change, CreateIcon):
        metadata: dict[str, object] = {
            "name": change.name,
            "tags": list(change.tags),
            "content": change.content,
        }
        if change.color_map:
            metadata["colorMap"] = dict(change.color_map)
        payload["metadata"] = metadata
        return payload
    if isinstance(change, RegenerateAll):
        return payload
    payload["iconKey"] = change.icon_key
    if isinstance(change, AddExtraTarget | RemoveExtraTarget):
        payload["targetId"] = change.target_id
    if isinstance(change, MigrateSvgToLock | MigrateSvgToFile | AddExtraTarget | RemoveExtraTarget):
        payload["filePath"] = change.file_path
    return payload


def change_from_payload(payload: object) -> Change:
    """Parse and validate the JSON wire form of a change."""
    if not isinstance(payload, dict):
        raise ValidationError("Change must be an object.")
    change_type = payload.get("type")
    if change_type not in CHANGE_TYPES:
        raise ValidationError(f"Unknown change type: {change_type!r}.")

    if change_type == "REGENERATE_ALL":
        return RegenerateAll()
    if change_type == "CREATE_ICON":
        return _create_icon_from_metadata(payload.get("metadata"))

    icon_key = _required_string(payload, "iconKey", change_type)
    if change_type == "REMOVE_ICON":
        return RemoveIcon(icon_key=icon_key)
    if change_type == "REGENERATE_ICON":
        return RegenerateIcon(icon_key=icon_key)

    file_path = _required_string(payload, "filePath", change_type)
    if change_type == "MIGRATE_SVG_TO_LOCK":
        return MigrateSvgToLock(icon_key=icon_key, file_path=file_path)
    if change_type == "MIGRATE_SVG_TO_FILE":
        return MigrateSvgToFile(icon_key=icon_key, file_path=file_path)

    target_id = _required_string(payload, "targetId", change_type)
    if change_type == "ADD_EXTRA_TARGET":
        return AddExtraTarget(icon_key=icon_key, target_id=target_id, file_path=file_path)
    return RemoveExtraTarget(icon_key=icon_key, target_id=target_id, file_path=file_path)


def _create_icon_from_metadata(metadata: object) -> CreateIcon:
    if not isinstance(metadata, dict):
        raise ValidationError("CREATE_ICON requires a 'metadata' object.")
    name = _required_string(metadata, "name", "CREATE_ICON")
    content = _required_string(metadata, "content", "CREATE_ICON")
    tags = metadata.get("tags", [])
    if not isinstance(tags, list) or not all(isinstance(tag, str) for tag in tags):
        raise ValidationError("CREATE_ICON field 'metadata.tags' must be a list of strings.")
    color_map = metadata.get("colorMap") or {}
    if not isinstance(color_map, dict) or not all(
        isinstance(key, str) and isinstance(value, str) for key, value in color_map.items()
    ):
        raise ValidationError("CREATE_ICON field 'metadata.colorMap' must map strings to strings.")
    return CreateIcon(name=name, tags=tuple(tags), content=content, color_map=dict(color_map))


def _required_string(payload: dict[str, object], key: str, change_type: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{change_type} requires a non-empty '{key}'.")
    return value
