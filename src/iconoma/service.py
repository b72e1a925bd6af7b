"""Submission and config surfaces wired over one project."""

from __future__ import annotations

from iconoma.actions import ActionExecutor, ActionQueue, ActionRecord, ActionTable, Change
from iconoma.diff import StaleTarget, compute_changes, find_stale_targets, stale_changes
from iconoma.logging import JsonlAuditLogger
from iconoma.security import join_project_path, resolve_project_path
from iconoma.settings import StudioSettings
from iconoma.store import Config, ConfigStore, LockFile, LockStore
from iconoma.svg import SvgContentPipeline, SvgOptimizer
from iconoma.targets import TargetRegistry, build_target_registry

AUDIT_LOG_NAME = "audit.jsonl"


class StudioService:
    """Owns the stores, the action table, and the queue worker for one project root."""

    def __init__(
        self,
        settings: StudioSettings,
        *,
        targets: TargetRegistry | None = None,
        optimizer: SvgOptimizer | None = None,
        audit_logger: JsonlAuditLogger | None = None,
    ) -> None:
        self._settings = settings
        if audit_logger is None and settings.audit_log_enabled:
            audit_logger = JsonlAuditLogger(path=settings.data_dir / AUDIT_LOG_NAME)
        self._audit_logger = audit_logger
        self._lock_store = LockStore(settings.lock_path)
        self._config_store = ConfigStore(settings.config_path, self._lock_store)
        self._pipeline = SvgContentPipeline(settings.project_root, optimizer)
        self._targets = targets or build_target_registry(settings, self._pipeline.read)
        self._table = ActionTable()
        executor = ActionExecutor(
            self._config_store,
            self._lock_store,
            self._pipeline,
            self._targets,
            audit_logger=self._audit_logger,
        )
        self._queue = ActionQueue(self._table, executor, audit_logger=self._audit_logger)

    @property
    def settings(self) -> StudioSettings:
        return self._settings

    @property
    def audit_logger(self) -> JsonlAuditLogger | None:
        return self._audit_logger

    @property
    def config_store(self) -> ConfigStore:
        return self._config_store

    @property
    def lock_store(self) -> LockStore:
        return self._lock_store

    def read_config(self) -> Config | None:
        return self._config_store.read()

    def read_lock(self) -> LockFile | None:
        return self._lock_store.read_lock()

    def diff(self, new_config: Config) -> list[Change]:
        """Changes needed to move the current lock from the stored config to ``new_config``."""
        self._check_paths(new_config)
        lock = self._lock_store.read_lock() or LockFile(config_hash="", icons={})
        return compute_changes(self._config_store.read(), new_config, lock)

    def write_config(self, config: Config, changes: list[Change]) -> list[int]:
        """Persist the config, then submit each change in order; return their action ids."""
        self._check_paths(config)
        self._config_store.write(config)
        return [self._queue.submit(change) for change in changes]

    def submit(self, change: Change) -> int:
        return self._queue.submit(change)

    def get(self, action_id: int) -> ActionRecord | None:
        return self._queue.get(action_id)

    def list_all(self) -> list[ActionRecord]:
        return self._queue.list_all()

    def stale_targets(self) -> list[StaleTarget]:
        lock = self._lock_store.read_lock()
        if lock is None:
            return []
        return find_stale_targets(lock)

    def regenerate_stale(self) -> list[int]:
        """Submit one ``REGENERATE_ICON`` per icon owning a stale target; return the ids."""
        lock = self._lock_store.read_lock()
        if lock is None:
            return []
        return [self._queue.submit(change) for change in stale_changes(lock)]

    def status(self) -> dict[str, object]:
        config = self._config_store.read()
        lock = self._lock_store.read_lock()
        records = self._queue.list_all()
        counts: dict[str, int] = {}
        for record in records:
            counts[record.status.value] = counts.get(record.status.value, 0) + 1
        return {
            "settings": self._settings.to_public_dict(),
            "config_present": config is not None,
            "config_hash": config.config_hash() if config is not None else None,
            "lock_present": lock is not None,
            "icon_count": len(lock.icons) if lock is not None else 0,
            "targets": list(self._targets.ids()),
            "actions": counts,
        }

    def _check_paths(self, config: Config) -> None:
        """Reject folders and output templates that resolve outside the project root."""
        root = self._settings.project_root
        if config.svg_storage.folder is not None:
            resolve_project_path(root, join_project_path(config.svg_storage.folder, "icon.svg"))
        for target in config.extra_targets:
            resolve_project_path(root, target.path_for("icon"))

    def join(self) -> None:
        """Wait until every submitted action has finished."""
        self._queue.join()

    def close(self) -> None:
        self._queue.close()
