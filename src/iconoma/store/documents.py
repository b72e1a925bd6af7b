"""Whole-document JSON persistence for the config and the lock."""

from __future__ import annotations

import json
from pathlib import Path

from iconoma.errors import ConfigMissingError, LockMissingError, ValidationError
from iconoma.store.models import Config, LockFile


def read_json_document(path: Path) -> object | None:
    """Read a JSON document, returning None when the file does not exist."""
    if not path.exists():
        return None
    with path.open("r", encoding="utf-8") as handle:
        try:
            return json.load(handle)
        except json.JSONDecodeError as error:
            raise ValidationError(f"{path.name} is not valid JSON: {error.msg}.") from error


def atomic_write_json(path: Path, payload: dict[str, object]) -> None:
    """Rewrite a whole document through a temp file so readers never see partial JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    with tmp.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, sort_keys=True, indent=2, ensure_ascii=False)
        handle.write("\n")
    tmp.replace(path)


class LockStore:
    """Reads and writes the lock document; the file is the only source of truth."""

    def __init__(self, lock_path: Path) -> None:
        self._lock_path = lock_path

    @property
    def path(self) -> Path:
        return self._lock_path

    def read_lock(self) -> LockFile | None:
        payload = read_json_document(self._lock_path)
        if payload is None:
            return None
        return LockFile.from_payload(payload)

    def require_lock(self) -> LockFile:
        lock = self.read_lock()
        if lock is None:
            raise LockMissingError()
        return lock

    def write_lock(self, lock: LockFile) -> None:
        atomic_write_json(self._lock_path, lock.to_payload())


class ConfigStore:
    """Reads and writes the config document and keeps the lock's config hash current."""

    def __init__(self, config_path: Path, lock_store: LockStore) -> None:
        self._config_path = config_path
        self._lock_store = lock_store

    @property
    def path(self) -> Path:
        return self._config_path

    def read(self) -> Config | None:
        payload = read_json_document(self._config_path)
        if payload is None:
            return None
        return Config.from_payload(payload)

    def require(self) -> Config:
        config = self.read()
        if config is None:
            raise ConfigMissingError()
        return config

    def write(self, config: Config) -> str:
        """Persist the config and store its hash in the lock, creating the lock if needed."""
        atomic_write_json(self._config_path, config.to_payload())
        config_hash = config.config_hash()
        lock = self._lock_store.read_lock()
        if lock is None:
            lock = LockFile(config_hash=config_hash, icons={})
        lock.config_hash = config_hash
        self._lock_store.write_lock(lock)
        return config_hash
