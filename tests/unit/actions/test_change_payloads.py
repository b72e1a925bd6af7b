from __future__ import annotations

import pytest

from iconoma.actions.changes import (
    AddExtraTarget,
    CreateIcon,
    MigrateSvgToLock,
    RegenerateAll,
    RemoveIcon,
    change_from_payload,
    change_to_payload,
)
from iconoma.errors import ValidationError


def test_target_change_wire_form() -> None:
    change = AddExtraTarget(icon_key="home", target_id="react", file_path="out/home.tsx")

    payload = change_to_payload(change)

    assert payload == {
        "type": "ADD_EXTRA_TARGET",
        "iconKey": "home",
        "targetId": "react",
        "filePath": "out/home.tsx",
    }
    assert change_from_payload(payload) == change


def test_create_icon_carries_metadata() -> None:
    change = change_from_payload(
        {
            "type": "CREATE_ICON",
            "metadata": {
                "name": "Arrow Left",
                "tags": ["nav"],
                "content": "<svg/>",
                "colorMap": {"#000": "currentColor"},
            },
        }
    )

    assert change == CreateIcon(
        name="Arrow Left",
        tags=("nav",),
        content="<svg/>",
        color_map={"#000": "currentColor"},
    )
    assert change_to_payload(change)["metadata"] == {
        "name": "Arrow Left",
        "tags": ["nav"],
        "content": "<svg/>",
        "colorMap": {"#000": "currentColor"},
    }


def test_kinds_carry_only_their_fields() -> None:
    assert change_to_payload(RegenerateAll()) == {"type": "REGENERATE_ALL"}
    assert change_to_payload(RemoveIcon(icon_key="home")) == {
        "type": "REMOVE_ICON",
        "iconKey": "home",
    }
    assert change_to_payload(MigrateSvgToLock(icon_key="home", file_path="icons/home.svg")) == {
        "type": "MIGRATE_SVG_TO_LOCK",
        "iconKey": "home",
        "filePath": "icons/home.svg",
    }


@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ([], "must be an object"),
        ({"type": "EXPLODE"}, "Unknown change type"),
        ({"type": "CREATE_ICON"}, "metadata"),
        ({"type": "CREATE_ICON", "metadata": {"name": "Home"}}, "content"),
        (
            {"type": "CREATE_ICON", "metadata": {"name": "Home", "content": "<svg/>", "tags": "x"}},
            "tags",
        ),
        ({"type": "ADD_EXTRA_TARGET", "iconKey": "home", "filePath": "a"}, "targetId"),
        ({"type": "MIGRATE_SVG_TO_FILE", "iconKey": "home"}, "filePath"),
        ({"type": "REMOVE_ICON", "iconKey": ""}, "iconKey"),
    ],
)
def test_invalid_payloads_raise_validation_error(payload: object, message: str) -> None:
    with pytest.raises(ValidationError, match=message):
        change_from_payload(payload)
