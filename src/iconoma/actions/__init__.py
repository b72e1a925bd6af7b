"""Change types, action records, and the single-worker action queue."""

from .changes import (
    AddExtraTarget,
    Change,
    CreateIcon,
    MigrateSvgToFile,
    MigrateSvgToLock,
    RegenerateAll,
    RegenerateIcon,
    RemoveExtraTarget,
    RemoveIcon,
    change_from_payload,
    change_to_payload,
)
from .executor import ActionExecutor, icon_key_for
from .queue import ActionQueue
from .records import ActionRecord, ActionStatus, ActionTable

__all__ = [
    "ActionExecutor",
    "ActionQueue",
    "ActionRecord",
    "ActionStatus",
    "ActionTable",
    "AddExtraTarget",
    "Change",
    "CreateIcon",
    "MigrateSvgToFile",
    "MigrateSvgToLock",
    "RegenerateAll",
    "RegenerateIcon",
    "RemoveExtraTarget",
    "RemoveIcon",
    "change_from_payload",
    "change_to_payload",
    "icon_key_for",
]
