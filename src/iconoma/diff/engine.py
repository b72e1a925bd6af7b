"""Derive reconciliation changes from a config transition."""

from __future__ import annotations

from dataclasses import dataclass

from iconoma.actions.changes import (
    AddExtraTarget,
    Change,
    MigrateSvgToFile,
    MigrateSvgToLock,
    RegenerateAll,
    RegenerateIcon,
    RemoveExtraTarget,
)
from iconoma.security.paths import join_project_path
from iconoma.store.models import Config, Icon, LockFile


@dataclass(slots=True, frozen=True)
class StaleTarget:
    """A generated artifact whose build provenance no longer matches the lock."""

    icon_key: str
    target_id: str
    path: str
    svg_changed: bool
    config_changed: bool

    def to_dict(self) -> dict[str, object]:
        return {
            "iconKey": self.icon_key,
            "targetId": self.target_id,
            "path": self.path,
            "svgChanged": self.svg_changed,
            "configChanged": self.config_changed,
        }


def compute_changes(old_config: Config | None, new_config: Config, lock: LockFile) -> list[Change]:
    """Return the ordered changes that move ``lock`` from ``old_config`` to ``new_config``.

    Icons are visited in lexicographic key order. Per icon, storage migrations
    come first, then added targets (new config order), removed targets (old
    config order), and changed targets as a remove at the old path followed
    by an add at the new path. An optimizer change appends one trailing
    ``RegenerateAll``. With no previous config there is nothing to reconcile.
    """
    if old_config is None:
        return []

    old_targets = {target.target_id: target for target in old_config.extra_targets}
    new_targets = {target.target_id: target for target in new_config.extra_targets}
    added = [target for target in new_config.extra_targets if target.target_id not in old_targets]
    removed = [
        target for target in old_config.extra_targets if target.target_id not in new_targets
    ]
    changed = [
        (old_targets[target.target_id], target)
        for target in new_config.extra_targets
        if target.target_id in old_targets
        and old_targets[target.target_id].output_path != target.output_path
    ]
    storage_changed = old_config.svg_storage != new_config.svg_storage

    changes: list[Change] = []
    for icon_key in lock.sorted_keys():
        icon = lock.icons[icon_key]
        if storage_changed:
            changes.extend(_storage_changes(icon_key, icon, new_config))
        for target in added:
            changes.append(
                AddExtraTarget(
                    icon_key=icon_key,
                    target_id=target.target_id,
                    file_path=target.path_for(icon_key),
                )
            )
        for target in removed:
            changes.append(
                RemoveExtraTarget(
                    icon_key=icon_key,
                    target_id=target.target_id,
                    file_path=target.path_for(icon_key),
                )
            )
        for old_target, new_target in changed:
            changes.append(
                RemoveExtraTarget(
                    icon_key=icon_key,
                    target_id=old_target.target_id,
                    file_path=old_target.path_for(icon_key),
                )
            )
            changes.append(
                AddExtraTarget(
                    icon_key=icon_key,
                    target_id=new_target.target_id,
                    file_path=new_target.path_for(icon_key),
                )
            )

    if old_config.optimizer_canonical() != new_config.optimizer_canonical():
        changes.append(RegenerateAll())
    return changes


def _storage_changes(icon_key: str, icon: Icon, new_config: Config) -> list[Change]:
    storage = new_config.svg_storage
    current_path = icon.svg.file_path
    if current_path is not None:
        if storage.in_lock:
            return [MigrateSvgToLock(icon_key=icon_key, file_path=current_path)]
        if storage.folder is None:
            return []
        destination = join_project_path(storage.folder, f"{icon_key}.svg")
        if destination == join_project_path(".", current_path):
            return []
        # Relocation between folders goes through the lock.
        return [
            MigrateSvgToLock(icon_key=icon_key, file_path=current_path),
            MigrateSvgToFile(icon_key=icon_key, file_path=destination),
        ]
    if not storage.in_lock and storage.folder is not None:
        return [
            MigrateSvgToFile(
                icon_key=icon_key,
                file_path=join_project_path(storage.folder, f"{icon_key}.svg"),
            )
        ]
    return []


def find_stale_targets(lock: LockFile) -> list[StaleTarget]:
    """List targets whose recorded svg or config hash differs from the lock's current ones."""
    stale: list[StaleTarget] = []
    for icon_key in lock.sorted_keys():
        icon = lock.icons[icon_key]
        for target_id in sorted(icon.targets):
            target = icon.targets[target_id]
            if not target.is_stale(icon.svg.hash, lock.config_hash):
                continue
            stale.append(
                StaleTarget(
                    icon_key=icon_key,
                    target_id=target_id,
                    path=target.path,
                    svg_changed=target.built_from.svg_hash != icon.svg.hash,
                    config_changed=target.built_from.config_hash != lock.config_hash,
                )
            )
    return stale


def stale_changes(lock: LockFile) -> list[RegenerateIcon]:
    """One ``RegenerateIcon`` per icon owning at least one stale target, in key order."""
    keys = dict.fromkeys(entry.icon_key for entry in find_stale_targets(lock))
    return [RegenerateIcon(icon_key=icon_key) for icon_key in keys]
