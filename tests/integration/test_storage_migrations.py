from __future__ import annotations

from pathlib import Path

from iconoma.actions import ActionStatus, CreateIcon, MigrateSvgToFile, MigrateSvgToLock
from iconoma.service import StudioService
from iconoma.settings import load_effective_settings
from iconoma.store import Config

STAR_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24">'
    '<path d="M12 2l3 7h7l-6 5 2 8-6-4-6 4 2-8-6-5h7z"/></svg>'
)


def _inline_service(tmp_path: Path) -> StudioService:
    service = StudioService(load_effective_settings(tmp_path))
    config = Config.from_payload(
        {
            "svgStorage": {"folder": None, "inLock": True},
            "extraTargets": [{"targetId": "react", "outputPath": "components/{name}.jsx"}],
        }
    )
    service.write_config(config, [])
    service.submit(CreateIcon(name="Star", tags=(), content=STAR_SVG))
    service.join()
    return service


def test_migrate_to_file_is_idempotent(tmp_path: Path) -> None:
    service = _inline_service(tmp_path)
    try:
        inline = service.read_lock()
        assert inline is not None
        markup = inline.icons["star"].svg.content

        first = service.submit(MigrateSvgToFile(icon_key="star", file_path="icons/star.svg"))
        second = service.submit(MigrateSvgToFile(icon_key="star", file_path="icons/star.svg"))
        service.join()

        for action_id in (first, second):
            record = service.get(action_id)
            assert record is not None
            assert record.status is ActionStatus.COMPLETED
        lock = service.read_lock()
        assert lock is not None
        assert lock.icons["star"].svg.content == "file://icons/star.svg"
        assert lock.icons["star"].svg.hash == inline.icons["star"].svg.hash
        assert (tmp_path / "icons" / "star.svg").read_text(encoding="utf-8") == markup
    finally:
        service.close()


def test_migrate_to_lock_inlines_markup_and_cleans_folder(tmp_path: Path) -> None:
    service = _inline_service(tmp_path)
    try:
        service.submit(MigrateSvgToFile(icon_key="star", file_path="icons/star.svg"))
        service.join()
        markup = (tmp_path / "icons" / "star.svg").read_text(encoding="utf-8")

        action_id = service.submit(MigrateSvgToLock(icon_key="star", file_path="icons/star.svg"))
        service.join()

        record = service.get(action_id)
        assert record is not None
        assert record.status is ActionStatus.COMPLETED
        lock = service.read_lock()
        assert lock is not None
        assert lock.icons["star"].svg.content == markup
        assert not (tmp_path / "icons").exists()
    finally:
        service.close()


def test_migrate_to_lock_fails_when_file_is_missing(tmp_path: Path) -> None:
    service = _inline_service(tmp_path)
    try:
        action_id = service.submit(MigrateSvgToLock(icon_key="star", file_path="icons/star.svg"))
        later = service.submit(MigrateSvgToFile(icon_key="star", file_path="icons/star.svg"))
        service.join()

        failed = service.get(action_id)
        assert failed is not None
        assert failed.status is ActionStatus.FAILED
        assert failed.error == "File icons/star.svg does not exist."
        following = service.get(later)
        assert following is not None
        assert following.status is ActionStatus.COMPLETED
    finally:
        service.close()
