from __future__ import annotations

from iconoma.actions.changes import (
    AddExtraTarget,
    MigrateSvgToFile,
    MigrateSvgToLock,
    RegenerateAll,
    RemoveExtraTarget,
)
from iconoma.diff import compute_changes
from iconoma.store.models import Config, Icon, IconSvg, LockFile


def _config(
    targets: list[tuple[str, str]],
    *,
    in_lock: bool = False,
    folder: str | None = "icons",
    optimizer: dict[str, object] | None = None,
) -> Config:
    return Config.from_payload(
        {
            "svgStorage": {"folder": folder, "inLock": in_lock},
            "extraTargets": [
                {"targetId": target_id, "outputPath": output_path}
                for target_id, output_path in targets
            ],
            "optimizer": optimizer or {},
        }
    )


def _file_icon(key: str) -> Icon:
    return Icon(name=key, tags=[], svg=IconSvg(content=f"file://icons/{key}.svg", hash=key))


def _inline_icon(key: str) -> Icon:
    return Icon(name=key, tags=[], svg=IconSvg(content="<svg/>", hash=key))


def _lock(*icons: tuple[str, Icon]) -> LockFile:
    return LockFile(config_hash="cfg", icons=dict(icons))


def test_first_run_returns_no_changes() -> None:
    lock = _lock(("home", _file_icon("home")))

    assert compute_changes(None, _config([("x", "out/{name}.ext")]), lock) == []


def test_added_target_emits_add_for_each_icon() -> None:
    lock = _lock(("home", _file_icon("home")))

    changes = compute_changes(_config([]), _config([("x", "./out/{name}.ext")]), lock)

    assert changes == [AddExtraTarget(icon_key="home", target_id="x", file_path="./out/home.ext")]


def test_changed_target_path_removes_old_then_adds_new() -> None:
    lock = _lock(("home", _file_icon("home")))

    changes = compute_changes(
        _config([("x", "./a/{name}.ext")]),
        _config([("x", "./b/{name}.ext")]),
        lock,
    )

    assert changes == [
        RemoveExtraTarget(icon_key="home", target_id="x", file_path="./a/home.ext"),
        AddExtraTarget(icon_key="home", target_id="x", file_path="./b/home.ext"),
    ]


def test_per_icon_order_is_added_removed_changed() -> None:
    lock = _lock(("home", _file_icon("home")))
    old = _config([("gone", "g/{name}"), ("moved", "m1/{name}")])
    new = _config([("moved", "m2/{name}"), ("fresh", "f/{name}")])

    changes = compute_changes(old, new, lock)

    assert [(change.type, change.target_id) for change in changes] == [
        ("ADD_EXTRA_TARGET", "fresh"),
        ("REMOVE_EXTRA_TARGET", "gone"),
        ("REMOVE_EXTRA_TARGET", "moved"),
        ("ADD_EXTRA_TARGET", "moved"),
    ]


def test_icons_are_visited_in_lexicographic_order_and_result_is_deterministic() -> None:
    lock = _lock(("zebra", _file_icon("zebra")), ("apple", _file_icon("apple")))
    old = _config([])
    new = _config([("x", "out/{name}.ext")])

    first = compute_changes(old, new, lock)
    second = compute_changes(old, new, lock)

    assert first == second
    assert [change.icon_key for change in first] == ["apple", "zebra"]


def test_optimizer_change_appends_single_regenerate_all() -> None:
    lock = _lock(("a", _file_icon("a")), ("b", _file_icon("b")))
    old = _config([("x", "out/{name}")])
    new = _config([("x", "out/{name}"), ("y", "y/{name}")], optimizer={"multipass": True})

    changes = compute_changes(old, new, lock)

    assert changes[-1] == RegenerateAll()
    assert changes.count(RegenerateAll()) == 1
    assert len(changes) == 3


def test_optimizer_key_order_does_not_count_as_change() -> None:
    lock = _lock(("a", _file_icon("a")))
    old = _config([], optimizer={"plugins": ["preset-default"], "multipass": True})
    new = _config([], optimizer={"multipass": True, "plugins": ["preset-default"]})

    assert compute_changes(old, new, lock) == []


def test_switch_to_lock_storage_migrates_file_backed_icons() -> None:
    lock = _lock(("home", _file_icon("home")), ("menu", _inline_icon("menu")))
    old = _config([("x", "out/{name}")])
    new = _config([("x", "out/{name}")], in_lock=True, folder=None)

    changes = compute_changes(old, new, lock)

    assert changes == [MigrateSvgToLock(icon_key="home", file_path="icons/home.svg")]


def test_switch_to_file_storage_migrates_lock_backed_icons() -> None:
    lock = _lock(("home", _inline_icon("home")))
    old = _config([("x", "out/{name}")], in_lock=True, folder=None)
    new = _config([("x", "out/{name}")], folder="./svgs")

    changes = compute_changes(old, new, lock)

    assert changes == [MigrateSvgToFile(icon_key="home", file_path="svgs/home.svg")]


def test_folder_change_relocates_through_the_lock() -> None:
    lock = _lock(("home", _file_icon("home")))

    changes = compute_changes(_config([]), _config([], folder="assets"), lock)

    assert changes == [
        MigrateSvgToLock(icon_key="home", file_path="icons/home.svg"),
        MigrateSvgToFile(icon_key="home", file_path="assets/home.svg"),
    ]


def test_equivalent_folder_spelling_is_not_a_relocation() -> None:
    lock = _lock(("home", _file_icon("home")))

    assert compute_changes(_config([]), _config([], folder="./icons"), lock) == []


def test_storage_migrations_come_before_target_changes() -> None:
    lock = _lock(("home", _inline_icon("home")))
    old = _config([("x", "out/{name}")], in_lock=True, folder=None)
    new = _config([("x", "out/{name}"), ("y", "y/{name}")], folder="icons")

    changes = compute_changes(old, new, lock)

    assert changes == [
        MigrateSvgToFile(icon_key="home", file_path="icons/home.svg"),
        AddExtraTarget(icon_key="home", target_id="y", file_path="y/home"),
    ]
