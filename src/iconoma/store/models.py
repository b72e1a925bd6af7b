"""Typed models for the config and lock documents."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field

from iconoma.errors import ValidationError

FILE_PREFIX = "file://"


def canonical_json(payload: object) -> str:
    """Serialize a JSON-compatible value to its canonical compact form."""
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def sha256_text(text: str) -> str:
    """Return the hex sha256 digest of UTF-8 encoded text."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


@dataclass(slots=True, frozen=True)
class SvgStorage:
    """Where canonical SVG markup lives: inline in the lock or under a folder."""

    folder: str | None
    in_lock: bool


@dataclass(slots=True, frozen=True)
class ExtraTarget:
    """One configured output target and its output-path template."""

    target_id: str
    output_path: str

    def path_for(self, icon_key: str) -> str:
        """Return the concrete output path for an icon key."""
        return self.output_path.replace("{name}", icon_key)


@dataclass(slots=True, frozen=True)
class Config:
    """Declared project configuration."""

    svg_storage: SvgStorage
    extra_targets: tuple[ExtraTarget, ...] = ()
    color_variables: tuple[str, ...] = ()
    optimizer: dict[str, object] = field(default_factory=dict)

    def to_payload(self) -> dict[str, object]:
        return {
            "svgStorage": {
                "folder": self.svg_storage.folder,
                "inLock": self.svg_storage.in_lock,
            },
            "extraTargets": [
                {"targetId": target.target_id, "outputPath": target.output_path}
                for target in self.extra_targets
            ],
            "colorVariables": list(self.color_variables),
            "optimizer": self.optimizer,
        }

    def canonical(self) -> str:
        return canonical_json(self.to_payload())

    def config_hash(self) -> str:
        """Digest of the canonical serialization, stored in the lock on write."""
        return sha256_text(self.canonical())

    def optimizer_canonical(self) -> str:
        return canonical_json(self.optimizer)

    @classmethod
    def from_payload(cls, payload: object) -> Config:
        """Parse and validate a config document."""
        if not isinstance(payload, dict):
            raise ValidationError("Config must be a JSON object.")
        storage_payload = _get_object(payload, "svgStorage", "config")
        in_lock = storage_payload.get("inLock")
        if not isinstance(in_lock, bool):
            raise ValidationError("Config field 'svgStorage.inLock' must be a boolean.")
        folder = storage_payload.get("folder")
        if folder is not None and not isinstance(folder, str):
            raise ValidationError("Config field 'svgStorage.folder' must be a string or null.")
        if in_lock:
            folder = None
        elif not folder or not folder.strip():
            raise ValidationError(
                "Config field 'svgStorage.folder' is required when 'svgStorage.inLock' is false."
            )

        raw_targets = payload.get("extraTargets", [])
        if not isinstance(raw_targets, list):
            raise ValidationError("Config field 'extraTargets' must be a list.")
        targets: list[ExtraTarget] = []
        seen_ids: set[str] = set()
        for index, raw_target in enumerate(raw_targets):
            if not isinstance(raw_target, dict):
                raise ValidationError(f"Config field 'extraTargets[{index}]' must be an object.")
            target_id = raw_target.get("targetId")
            output_path = raw_target.get("outputPath")
            if not isinstance(target_id, str) or not target_id.strip():
                raise ValidationError(
                    f"Config field 'extraTargets[{index}].targetId' must be a non-empty string."
                )
            if not isinstance(output_path, str) or not output_path.strip():
                raise ValidationError(
                    f"Config field 'extraTargets[{index}].outputPath' must be a non-empty string."
                )
            if target_id in seen_ids:
                raise ValidationError(f"Config declares target '{target_id}' more than once.")
            seen_ids.add(target_id)
            targets.append(ExtraTarget(target_id=target_id, output_path=output_path))
        if in_lock and not targets:
            raise ValidationError(
                "At least one extra target is required when 'svgStorage.inLock' is true."
            )

        raw_variables = payload.get("colorVariables", [])
        if not isinstance(raw_variables, list) or not all(
            isinstance(item, str) for item in raw_variables
        ):
            raise ValidationError("Config field 'colorVariables' must be a list of strings.")
        color_variables = tuple(item for item in raw_variables if item.strip())

        optimizer = payload.get("optimizer", {})
        if not isinstance(optimizer, dict):
            raise ValidationError("Config field 'optimizer' must be an object.")
        _validate_optimizer(optimizer)

        return cls(
            svg_storage=SvgStorage(folder=folder, in_lock=in_lock),
            extra_targets=tuple(targets),
            color_variables=color_variables,
            optimizer=optimizer,
        )


def _validate_optimizer(optimizer: dict[str, object]) -> None:
    plugins = optimizer.get("plugins", [])
    if not isinstance(plugins, list):
        raise ValidationError("Config field 'optimizer.plugins' must be a list.")
    for index, plugin in enumerate(plugins):
        if isinstance(plugin, str):
            continue
        if not isinstance(plugin, dict) or not isinstance(plugin.get("name"), str):
            raise ValidationError(
                f"Config field 'optimizer.plugins[{index}]' must be a name or "
                "an object {name, params}."
            )
        params = plugin.get("params", {})
        if not isinstance(params, dict):
            raise ValidationError(
                f"Config field 'optimizer.plugins[{index}].params' must be an object."
            )
        if plugin["name"] == "convertColors" and params.get("currentColor") is True:
            raise ValidationError(
                "Set convertColors.params.currentColor to false; colors are mapped "
                "through the configured color variables."
            )


@dataclass(slots=True)
class IconSvg:
    """Stored markup (inline or ``file://`` reference) and its content hash."""

    content: str
    hash: str

    @property
    def is_file_backed(self) -> bool:
        return self.content.startswith(FILE_PREFIX)

    @property
    def file_path(self) -> str | None:
        """Relative path of the backing file, or None for inline markup."""
        if not self.is_file_backed:
            return None
        return self.content[len(FILE_PREFIX) :]


@dataclass(slots=True, frozen=True)
class BuiltFrom:
    """Build provenance of a generated target artifact."""

    svg_hash: str
    config_hash: str


@dataclass(slots=True, frozen=True)
class Target:
    """Generated artifact for one icon and one target adapter."""

    path: str
    built_from: BuiltFrom

    def is_stale(self, svg_hash: str, config_hash: str) -> bool:
        return self.built_from.svg_hash != svg_hash or self.built_from.config_hash != config_hash


@dataclass(slots=True)
class Icon:
    """Catalog entry for one icon."""

    name: str
    tags: list[str]
    svg: IconSvg
    targets: dict[str, Target] = field(default_factory=dict)
    color_variable_keys: list[str] = field(default_factory=list)

    def to_payload(self) -> dict[str, object]:
        return {
            "name": self.name,
            "tags": list(self.tags),
            "svg": {"content": self.svg.content, "hash": self.svg.hash},
            "targets": {
                target_id: {
                    "path": target.path,
                    "builtFrom": {
                        "svgHash": target.built_from.svg_hash,
                        "configHash": target.built_from.config_hash,
                    },
                }
                for target_id, target in self.targets.items()
            },
            "colorVariableKeys": list(self.color_variable_keys),
        }

    @classmethod
    def from_payload(cls, icon_key: str, payload: object) -> Icon:
        where = f"icons.{icon_key}"
        if not isinstance(payload, dict):
            raise ValidationError(f"Lock field '{where}' must be an object.")
        name = payload.get("name")
        if not isinstance(name, str):
            raise ValidationError(f"Lock field '{where}.name' must be a string.")
        tags = _string_list(payload.get("tags", []), f"{where}.tags")
        svg_payload = _get_object(payload, "svg", where)
        content = svg_payload.get("content")
        svg_hash = svg_payload.get("hash")
        if not isinstance(content, str) or not isinstance(svg_hash, str):
            raise ValidationError(f"Lock field '{where}.svg' must hold string content and hash.")
        targets: dict[str, Target] = {}
        raw_targets = payload.get("targets", {})
        if not isinstance(raw_targets, dict):
            raise ValidationError(f"Lock field '{where}.targets' must be an object.")
        for target_id, raw_target in raw_targets.items():
            target_where = f"{where}.targets.{target_id}"
            if not isinstance(raw_target, dict):
                raise ValidationError(f"Lock field '{target_where}' must be an object.")
            path = raw_target.get("path")
            built = _get_object(raw_target, "builtFrom", target_where)
            built_svg = built.get("svgHash")
            built_config = built.get("configHash")
            if not isinstance(path, str):
                raise ValidationError(f"Lock field '{target_where}.path' must be a string.")
            if not isinstance(built_svg, str) or not isinstance(built_config, str):
                raise ValidationError(f"Lock field '{target_where}.builtFrom' must hold hashes.")
            targets[target_id] = Target(
                path=path,
                built_from=BuiltFrom(svg_hash=built_svg, config_hash=built_config),
            )
        color_variable_keys = _string_list(
            payload.get("colorVariableKeys", []), f"{where}.colorVariableKeys"
        )
        return cls(
            name=name,
            tags=tags,
            svg=IconSvg(content=content, hash=svg_hash),
            targets=targets,
            color_variable_keys=color_variable_keys,
        )


@dataclass(slots=True)
class LockFile:
    """Persisted catalog: config hash plus icon records."""

    config_hash: str
    icons: dict[str, Icon] = field(default_factory=dict)

    def sorted_keys(self) -> list[str]:
        return sorted(self.icons.keys())

    def to_payload(self) -> dict[str, object]:
        return {
            "configHash": self.config_hash,
            "icons": {key: icon.to_payload() for key, icon in self.icons.items()},
        }

    @classmethod
    def from_payload(cls, payload: object) -> LockFile:
        if not isinstance(payload, dict):
            raise ValidationError("Lock file must be a JSON object.")
        config_hash = payload.get("configHash")
        if not isinstance(config_hash, str):
            raise ValidationError("Lock field 'configHash' must be a string.")
        raw_icons = payload.get("icons", {})
        if not isinstance(raw_icons, dict):
            raise ValidationError("Lock field 'icons' must be an object.")
        icons = {key: Icon.from_payload(key, raw) for key, raw in raw_icons.items()}
        return cls(config_hash=config_hash, icons=icons)


def _get_object(payload: dict[str, object], key: str, where: str) -> dict[str, object]:
    value = payload.get(key)
    if not isinstance(value, dict):
        raise ValidationError(f"Field '{where}.{key}' must be an object.")
    return value


def _string_list(value: object, where: str) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValidationError(f"Lock field '{where}' must be a list of strings.")
    return list(value)
