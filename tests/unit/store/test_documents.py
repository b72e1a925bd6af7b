from __future__ import annotations

import json
from pathlib import Path

import pytest

from iconoma.errors import ConfigMissingError, LockMissingError, ValidationError
from iconoma.store import (
    BuiltFrom,
    Config,
    ConfigStore,
    Icon,
    IconSvg,
    LockFile,
    LockStore,
    Target,
)


def _config() -> Config:
    return Config.from_payload(
        {
            "svgStorage": {"folder": None, "inLock": True},
            "extraTargets": [{"targetId": "react", "outputPath": "out/{name}.tsx"}],
        }
    )


def test_missing_documents_read_as_none_and_require_raises(tmp_path: Path) -> None:
    lock_store = LockStore(tmp_path / "iconoma.lock.json")
    config_store = ConfigStore(tmp_path / "iconoma.config.json", lock_store)

    assert lock_store.read_lock() is None
    assert config_store.read() is None
    with pytest.raises(LockMissingError):
        lock_store.require_lock()
    with pytest.raises(ConfigMissingError):
        config_store.require()


def test_config_write_creates_lock_with_config_hash(tmp_path: Path) -> None:
    lock_store = LockStore(tmp_path / "iconoma.lock.json")
    config_store = ConfigStore(tmp_path / "iconoma.config.json", lock_store)
    config = _config()

    config_hash = config_store.write(config)

    assert config_hash == config.config_hash()
    assert config_store.require() == config
    assert lock_store.require_lock() == LockFile(config_hash=config_hash, icons={})


def test_config_write_keeps_existing_icons(tmp_path: Path) -> None:
    lock_store = LockStore(tmp_path / "iconoma.lock.json")
    config_store = ConfigStore(tmp_path / "iconoma.config.json", lock_store)
    icon = Icon(
        name="Home",
        tags=["nav"],
        svg=IconSvg(content="<svg/>", hash="abc"),
        targets={"react": Target("out/home.tsx", BuiltFrom(svg_hash="abc", config_hash="old"))},
        color_variable_keys=["currentColor"],
    )
    lock_store.write_lock(LockFile(config_hash="old", icons={"home": icon}))

    config_store.write(_config())

    lock = lock_store.require_lock()
    assert lock.config_hash == _config().config_hash()
    assert lock.icons["home"] == icon
    assert lock.icons["home"].targets["react"].is_stale("abc", lock.config_hash)


def test_lock_document_uses_camel_case_keys(tmp_path: Path) -> None:
    lock_store = LockStore(tmp_path / "iconoma.lock.json")
    icon = Icon(
        name="Home",
        tags=[],
        svg=IconSvg(content="file://icons/home.svg", hash="abc"),
        targets={"react": Target("out/home.tsx", BuiltFrom(svg_hash="abc", config_hash="cfg"))},
    )

    lock_store.write_lock(LockFile(config_hash="cfg", icons={"home": icon}))

    payload = json.loads(lock_store.path.read_text(encoding="utf-8"))
    assert payload["configHash"] == "cfg"
    record = payload["icons"]["home"]
    assert record["svg"] == {"content": "file://icons/home.svg", "hash": "abc"}
    assert record["targets"]["react"]["builtFrom"] == {"svgHash": "abc", "configHash": "cfg"}
    assert record["colorVariableKeys"] == []
    assert not (tmp_path / "iconoma.lock.json.tmp").exists()


def test_invalid_json_and_malformed_lock_raise_validation_error(tmp_path: Path) -> None:
    lock_path = tmp_path / "iconoma.lock.json"
    lock_store = LockStore(lock_path)

    lock_path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValidationError, match="not valid JSON"):
        lock_store.read_lock()

    lock_path.write_text(json.dumps({"configHash": "x", "icons": {"home": {"name": 3}}}), "utf-8")
    with pytest.raises(ValidationError, match="icons.home.name"):
        lock_store.read_lock()
