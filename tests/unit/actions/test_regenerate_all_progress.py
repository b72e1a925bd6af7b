from __future__ import annotations

from pathlib import Path

from iconoma.actions import ActionExecutor, CreateIcon
from iconoma.store import Config, ConfigStore, LockStore
from iconoma.svg import SvgContentPipeline
from iconoma.targets import TargetRegistry

SQUARE_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 8 8">'
    '<rect width="8" height="8" fill="#000"/></svg>'
)


def _executor(tmp_path: Path) -> ActionExecutor:
    lock_store = LockStore(tmp_path / "iconoma.lock.json")
    config_store = ConfigStore(tmp_path / "iconoma.config.json", lock_store)
    config_store.write(Config.from_payload({"svgStorage": {"folder": "icons", "inLock": False}}))
    return ActionExecutor(config_store, lock_store, SvgContentPipeline(tmp_path), TargetRegistry())


def test_failed_icons_do_not_advance_progress(tmp_path: Path) -> None:
    executor = _executor(tmp_path)
    executor.create_icon(CreateIcon(name="Alpha", tags=(), content=SQUARE_SVG))
    executor.create_icon(CreateIcon(name="Beta", tags=(), content=SQUARE_SVG))
    (tmp_path / "icons" / "alpha.svg").unlink()

    seen: list[int] = []
    follow_ups = executor.regenerate_all(seen.append)

    assert seen == [0, 50]
    assert follow_ups == []
    assert (tmp_path / "icons" / "beta.svg").is_file()


def test_all_icons_regenerated_reaches_full_progress(tmp_path: Path) -> None:
    executor = _executor(tmp_path)
    for name in ("One", "Two", "Three"):
        executor.create_icon(CreateIcon(name=name, tags=(), content=SQUARE_SVG))

    seen: list[int] = []
    executor.regenerate_all(seen.append)

    assert seen == [33, 67, 100]


def test_empty_lock_reports_no_progress(tmp_path: Path) -> None:
    executor = _executor(tmp_path)

    seen: list[int] = []

    assert executor.regenerate_all(seen.append) == []
    assert seen == []
