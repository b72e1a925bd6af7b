"""Change handlers run by the single queue worker."""

from __future__ import annotations

from collections.abc import Callable

from iconoma.actions.changes import (
    AddExtraTarget,
    Change,
    CreateIcon,
    MigrateSvgToFile,
    MigrateSvgToLock,
    RegenerateAll,
    RegenerateIcon,
    RemoveExtraTarget,
    RemoveIcon,
)
from iconoma.errors import AdapterError, IconNotFoundError, IconomaError, ValidationError
from iconoma.logging.audit import EVENT_ICON, JsonlAuditLogger
from iconoma.security.paths import PathBlockedError, remove_empty_parent
from iconoma.store.documents import ConfigStore, LockStore
from iconoma.store.models import (
    FILE_PREFIX,
    BuiltFrom,
    Icon,
    IconSvg,
    LockFile,
    Target,
    sha256_text,
)
from iconoma.svg.content import SvgContentPipeline
from iconoma.targets.base import TargetAdapter
from iconoma.targets.registry import TargetRegistry

ProgressCallback = Callable[[int], None]


def icon_key_for(name: str) -> str:
    """Derive the lock key of an icon from its display name."""
    key = name.strip().lower().replace(" ", "-")
    if not key or "/" in key or "\\" in key or ".." in key:
        raise ValidationError(f"Icon name {name!r} does not produce a usable icon key.")
    return key


def error_code_for(error: Exception) -> str:
    """Map an exception to the stable code reported in records and logs."""
    if isinstance(error, IconomaError):
        return error.code
    if isinstance(error, PathBlockedError):
        return "PATH_BLOCKED"
    return "INTERNAL_ERROR"


def _no_progress(percentage: int) -> None:
    return None


class ActionExecutor:
    """Dispatches a change to its handler; handlers return follow-up changes.

    Every handler reads the config and lock from disk when it starts, so no
    state carries over between actions.
    """

    def __init__(
        self,
        config_store: ConfigStore,
        lock_store: LockStore,
        pipeline: SvgContentPipeline,
        targets: TargetRegistry,
        audit_logger: JsonlAuditLogger | None = None,
    ) -> None:
        self._config_store = config_store
        self._lock_store = lock_store
        self._pipeline = pipeline
        self._targets = targets
        self._audit_logger = audit_logger

    def execute(self, change: Change, progress: ProgressCallback | None = None) -> list[Change]:
        report = progress or _no_progress
        if isinstance(change, CreateIcon):
            return self.create_icon(change)
        if isinstance(change, AddExtraTarget):
            self.add_extra_target(change)
            return []
        if isinstance(change, RemoveExtraTarget):
            self.remove_extra_target(change)
            return []
        if isinstance(change, MigrateSvgToLock):
            self.migrate_svg_to_lock(change)
            return []
        if isinstance(change, MigrateSvgToFile):
            self.migrate_svg_to_file(change)
            return []
        if isinstance(change, RemoveIcon):
            self.remove_icon(change)
            return []
        if isinstance(change, RegenerateIcon):
            return self.regenerate_icon(change)
        if isinstance(change, RegenerateAll):
            return self.regenerate_all(report)
        raise ValidationError(f"Unsupported change: {change!r}.")

    def create_icon(self, change: CreateIcon) -> list[Change]:
        config = self._config_store.require()
        icon_key = icon_key_for(change.name)
        canonical = self._pipeline.optimize(change.content, config.optimizer, change.color_map)
        stored = self._pipeline.store(config, icon_key, canonical)

        lock = self._read_or_init_lock(config.config_hash())
        lock.icons[icon_key] = Icon(
            name=change.name,
            tags=list(change.tags),
            svg=IconSvg(content=stored.content, hash=stored.hash),
            targets={},
            color_variable_keys=list(dict.fromkeys(change.color_map.values())),
        )
        self._lock_store.write_lock(lock)

        return [
            AddExtraTarget(
                icon_key=icon_key,
                target_id=target.target_id,
                file_path=target.path_for(icon_key),
            )
            for target in config.extra_targets
        ]

    def add_extra_target(self, change: AddExtraTarget) -> None:
        lock = self._lock_store.require_lock()
        icon = self._require_icon(lock, change.icon_key)
        adapter = self._targets.resolve(change.target_id)
        self._call_adapter(adapter, "add", icon, change.icon_key, change.file_path)
        icon.targets[change.target_id] = Target(
            path=change.file_path,
            built_from=BuiltFrom(svg_hash=icon.svg.hash, config_hash=lock.config_hash),
        )
        self._lock_store.write_lock(lock)

    def remove_extra_target(self, change: RemoveExtraTarget) -> None:
        lock = self._lock_store.require_lock()
        icon = self._require_icon(lock, change.icon_key)
        self._remove_target(icon, change.icon_key, change.target_id, change.file_path)
        self._lock_store.write_lock(lock)

    def migrate_svg_to_lock(self, change: MigrateSvgToLock) -> None:
        lock = self._lock_store.require_lock()
        icon = self._require_icon(lock, change.icon_key)
        content = self._pipeline.read_file(change.file_path)
        content_hash = sha256_text(content)
        if icon.svg.is_file_backed or content_hash != icon.svg.hash:
            icon.svg = IconSvg(content=content, hash=content_hash)
            self._lock_store.write_lock(lock)
        path = self._pipeline.resolve(change.file_path)
        path.unlink()
        remove_empty_parent(path, self._pipeline.project_root)

    def migrate_svg_to_file(self, change: MigrateSvgToFile) -> None:
        path = self._pipeline.resolve(change.file_path)
        if path.exists():
            return
        lock = self._lock_store.require_lock()
        icon = self._require_icon(lock, change.icon_key)
        content = self._pipeline.read(icon)
        self._pipeline.write_file(change.file_path, content)
        icon.svg = IconSvg(content=FILE_PREFIX + change.file_path, hash=sha256_text(content))
        self._lock_store.write_lock(lock)

    def remove_icon(self, change: RemoveIcon) -> None:
        lock = self._lock_store.require_lock()
        icon = self._require_icon(lock, change.icon_key)
        for target_id, target in list(icon.targets.items()):
            self._remove_target(icon, change.icon_key, target_id, target.path)
            # The lock lists only targets that still exist on disk.
            self._lock_store.write_lock(lock)
        file_path = icon.svg.file_path
        if file_path is not None:
            path = self._pipeline.resolve(file_path)
            path.unlink(missing_ok=True)
            remove_empty_parent(path, self._pipeline.project_root)
        del lock.icons[change.icon_key]
        self._lock_store.write_lock(lock)

    def regenerate_icon(self, change: RegenerateIcon) -> list[Change]:
        """Remove then recreate an icon from its current markup.

        Anything a target artifact carried beyond what the create step emits
        is not preserved.
        """
        lock = self._lock_store.require_lock()
        icon = self._require_icon(lock, change.icon_key)
        content = self._pipeline.read(icon)
        snapshot = CreateIcon(name=icon.name, tags=tuple(icon.tags), content=content)
        color_variable_keys = list(icon.color_variable_keys)

        self.remove_icon(RemoveIcon(icon_key=change.icon_key))
        follow_ups = self.create_icon(snapshot)

        if color_variable_keys:
            refreshed = self._lock_store.require_lock()
            recreated = refreshed.icons.get(icon_key_for(snapshot.name))
            if recreated is not None:
                recreated.color_variable_keys = color_variable_keys
                self._lock_store.write_lock(refreshed)
        return follow_ups

    def regenerate_all(self, progress: ProgressCallback) -> list[Change]:
        """Regenerate every icon; progress counts only icons that regenerated."""
        icon_keys = self._lock_store.require_lock().sorted_keys()
        total = len(icon_keys)
        follow_ups: list[Change] = []
        succeeded = 0
        for icon_key in icon_keys:
            try:
                follow_ups.extend(self.regenerate_icon(RegenerateIcon(icon_key=icon_key)))
            except Exception as error:
                self._log_icon_failure(icon_key, error)
            else:
                succeeded += 1
            progress(round(100 * succeeded / total))
        return follow_ups

    def _read_or_init_lock(self, config_hash: str) -> LockFile:
        lock = self._lock_store.read_lock()
        if lock is None:
            return LockFile(config_hash=config_hash, icons={})
        return lock

    def _require_icon(self, lock: LockFile, icon_key: str) -> Icon:
        icon = lock.icons.get(icon_key)
        if icon is None:
            raise IconNotFoundError(icon_key)
        return icon

    def _remove_target(self, icon: Icon, icon_key: str, target_id: str, file_path: str) -> None:
        adapter = self._targets.resolve(target_id)
        self._call_adapter(adapter, "remove", icon, icon_key, file_path)
        icon.targets.pop(target_id, None)

    def _call_adapter(
        self, adapter: TargetAdapter, operation: str, icon: Icon, icon_key: str, file_path: str
    ) -> None:
        try:
            if operation == "add":
                adapter.add_icon(icon, icon_key, file_path)
            else:
                adapter.remove_icon(icon, icon_key, file_path)
        except (IconomaError, PathBlockedError):
            raise
        except Exception as error:
            raise AdapterError(adapter.target_id, str(error) or type(error).__name__) from error

    def _log_icon_failure(self, icon_key: str, error: Exception) -> None:
        if self._audit_logger is None:
            return
        self._audit_logger.record(
            EVENT_ICON,
            "REGENERATE_ICON",
            icon_key,
            ok=False,
            blocked=isinstance(error, PathBlockedError),
            error_code=error_code_for(error),
            metadata={"iconKey": icon_key, "error": str(error)},
        )
