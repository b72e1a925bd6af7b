from __future__ import annotations

from pathlib import Path

import pytest

from iconoma.settings import (
    SettingsOverrides,
    default_project_root,
    load_effective_settings,
)


def test_defaults_without_settings_file(tmp_path: Path) -> None:
    settings = load_effective_settings(tmp_path)

    assert settings.project_root == tmp_path.resolve()
    assert settings.config_path == tmp_path.resolve() / "iconoma.config.json"
    assert settings.lock_path == tmp_path.resolve() / "iconoma.lock.json"
    assert settings.data_dir == tmp_path.resolve() / ".iconoma"
    assert settings.audit_log_enabled is True


def test_merge_order_defaults_then_file_then_overrides(tmp_path: Path) -> None:
    (tmp_path / "iconoma.toml").write_text(
        "\n".join(
            [
                "[studio]",
                'config_file = "design/icons.config.json"',
                'lock_file = "design/icons.lock.json"',
                "audit_log = false",
            ]
        ),
        encoding="utf-8",
    )

    from_file = load_effective_settings(tmp_path)
    overridden = load_effective_settings(
        tmp_path,
        SettingsOverrides(lock_file="other.lock.json", audit_log_enabled=True),
    )

    root = tmp_path.resolve()
    assert from_file.config_path == root / "design" / "icons.config.json"
    assert from_file.lock_path == root / "design" / "icons.lock.json"
    assert from_file.audit_log_enabled is False
    assert overridden.config_path == root / "design" / "icons.config.json"
    assert overridden.lock_path == root / "other.lock.json"
    assert overridden.audit_log_enabled is True


@pytest.mark.parametrize(
    ("body", "message"),
    [
        ('studio = "x"', "must be a table"),
        ("[studio]\naudit_log = 1", "studio.audit_log"),
        ('[studio]\nconfig_file = "../outside.json"', "studio.config_file"),
        ('[studio]\nlock_file = ""', "studio.lock_file"),
    ],
)
def test_invalid_settings_raise_value_error(tmp_path: Path, body: str, message: str) -> None:
    (tmp_path / "iconoma.toml").write_text(body, encoding="utf-8")

    with pytest.raises(ValueError, match=message):
        load_effective_settings(tmp_path)


def test_project_root_comes_from_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("ICONOMA_PWD", str(tmp_path))
    assert default_project_root() == tmp_path

    monkeypatch.delenv("ICONOMA_PWD")
    assert default_project_root() == Path.cwd()


def test_public_snapshot_is_serializable(tmp_path: Path) -> None:
    snapshot = load_effective_settings(tmp_path).to_public_dict()

    assert set(snapshot) == {
        "project_root",
        "data_dir",
        "config_path",
        "lock_path",
        "audit_log_enabled",
    }
    assert all(isinstance(value, (str, bool)) for value in snapshot.values())
