"""Studio settings loading and deterministic merge order."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path

DEFAULT_CONFIG_FILE = "iconoma.config.json"
DEFAULT_LOCK_FILE = "iconoma.lock.json"
DEFAULT_DATA_DIR = ".iconoma"
SETTINGS_FILE = "iconoma.toml"
PROJECT_ROOT_ENV = "ICONOMA_PWD"


@dataclass(slots=True, frozen=True)
class StudioSettings:
    """Fully merged studio settings."""

    project_root: Path
    data_dir: Path
    config_path: Path
    lock_path: Path
    audit_log_enabled: bool

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable settings snapshot for tool responses."""
        return {
            "project_root": str(self.project_root),
            "data_dir": str(self.data_dir),
            "config_path": str(self.config_path),
            "lock_path": str(self.lock_path),
            "audit_log_enabled": self.audit_log_enabled,
        }


@dataclass(slots=True, frozen=True)
class SettingsOverrides:
    """Optional startup overrides applied at highest precedence."""

    data_dir: Path | None = None
    config_file: str | None = None
    lock_file: str | None = None
    audit_log_enabled: bool | None = None


def default_project_root() -> Path:
    """Resolve the project root from the environment, falling back to cwd."""
    value = os.environ.get(PROJECT_ROOT_ENV, "").strip()
    return Path(value) if value else Path.cwd()


def default_settings(project_root: Path) -> StudioSettings:
    """Build default settings for a given project root."""
    root = project_root.resolve()
    return StudioSettings(
        project_root=root,
        data_dir=root / DEFAULT_DATA_DIR,
        config_path=root / DEFAULT_CONFIG_FILE,
        lock_path=root / DEFAULT_LOCK_FILE,
        audit_log_enabled=True,
    )


def load_settings_file(project_root: Path) -> dict[str, object]:
    """Load optional iconoma.toml from the project root."""
    settings_path = project_root / SETTINGS_FILE
    if not settings_path.exists():
        return {}
    with settings_path.open("rb") as handle:
        payload = tomllib.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{SETTINGS_FILE} must contain a top-level table.")
    return payload


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Settings section '{key}' must be a table.")
    return value


def _optional_file_name(value: object, name: str, default: str) -> str:
    if value is None:
        return default
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Settings field '{name}' must be a non-empty string.")
    normalized = value.strip().replace("\\", "/")
    if normalized.startswith("/") or ".." in normalized.split("/"):
        raise ValueError(f"Settings field '{name}' must be a path inside the project root.")
    return normalized


def merge_settings(
    base: StudioSettings, file_payload: dict[str, object], overrides: SettingsOverrides
) -> StudioSettings:
    """Merge defaults, project settings file, then startup overrides."""
    studio_payload = _get_table(file_payload, "studio")
    root = base.project_root

    data_dir = base.data_dir
    if "data_dir" in studio_payload:
        data_dir = root / _optional_file_name(
            studio_payload["data_dir"], "studio.data_dir", DEFAULT_DATA_DIR
        )
    config_path = base.config_path
    if "config_file" in studio_payload:
        config_path = root / _optional_file_name(
            studio_payload["config_file"], "studio.config_file", DEFAULT_CONFIG_FILE
        )
    lock_path = base.lock_path
    if "lock_file" in studio_payload:
        lock_path = root / _optional_file_name(
            studio_payload["lock_file"], "studio.lock_file", DEFAULT_LOCK_FILE
        )
    audit_log_enabled = base.audit_log_enabled
    if "audit_log" in studio_payload:
        raw_audit = studio_payload["audit_log"]
        if not isinstance(raw_audit, bool):
            raise ValueError("Settings field 'studio.audit_log' must be a boolean.")
        audit_log_enabled = raw_audit

    merged = StudioSettings(
        project_root=root,
        data_dir=data_dir,
        config_path=config_path,
        lock_path=lock_path,
        audit_log_enabled=audit_log_enabled,
    )
    return apply_overrides(merged, overrides)


def apply_overrides(settings: StudioSettings, overrides: SettingsOverrides) -> StudioSettings:
    """Apply startup overrides at highest precedence."""
    root = settings.project_root
    config_path = settings.config_path
    if overrides.config_file is not None:
        config_path = root / _optional_file_name(
            overrides.config_file, "overrides.config_file", DEFAULT_CONFIG_FILE
        )
    lock_path = settings.lock_path
    if overrides.lock_file is not None:
        lock_path = root / _optional_file_name(
            overrides.lock_file, "overrides.lock_file", DEFAULT_LOCK_FILE
        )
    data_dir = overrides.data_dir or settings.data_dir
    return StudioSettings(
        project_root=root,
        data_dir=data_dir.resolve(),
        config_path=config_path,
        lock_path=lock_path,
        audit_log_enabled=(
            overrides.audit_log_enabled
            if overrides.audit_log_enabled is not None
            else settings.audit_log_enabled
        ),
    )


def load_effective_settings(
    project_root: Path, overrides: SettingsOverrides | None = None
) -> StudioSettings:
    """Load effective settings using merge order defaults -> iconoma.toml -> overrides."""
    resolved_root = project_root.resolve()
    base = default_settings(resolved_root)
    payload = load_settings_file(resolved_root)
    return merge_settings(base, payload, overrides or SettingsOverrides())
