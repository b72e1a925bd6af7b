"""In-memory action record table shared by the submission surface and the worker."""

from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from enum import StrEnum

from iconoma.actions.changes import Change, change_to_payload


class ActionStatus(StrEnum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATUSES = frozenset({ActionStatus.COMPLETED, ActionStatus.FAILED})


@dataclass(slots=True, frozen=True)
class ActionRecord:
    """Snapshot of one submitted change and its progress."""

    id: int
    change: Change
    status: ActionStatus = ActionStatus.PENDING
    percentage: int = 0
    error: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "id": self.id,
            "change": change_to_payload(self.change),
            "status": self.status.value,
            "percentage": self.percentage,
        }
        if self.error is not None:
            payload["error"] = self.error
        return payload


class ActionTable:
    """Insertion-ordered records keyed by a 1-based id that is never reused.

    Records are immutable snapshots; ``update`` swaps in a new snapshot under
    the table lock so readers never observe a half-applied transition.
    """

    def __init__(self) -> None:
        self._records: dict[int, ActionRecord] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def create(self, change: Change) -> int:
        with self._lock:
            action_id = self._next_id
            self._next_id += 1
            self._records[action_id] = ActionRecord(id=action_id, change=change)
            return action_id

    def get(self, action_id: int) -> ActionRecord | None:
        with self._lock:
            return self._records.get(action_id)

    def update(
        self,
        action_id: int,
        *,
        status: ActionStatus | None = None,
        percentage: int | None = None,
        error: str | None = None,
    ) -> ActionRecord | None:
        with self._lock:
            record = self._records.get(action_id)
            if record is None:
                return None
            changes: dict[str, object] = {}
            if status is not None:
                changes["status"] = status
            if percentage is not None:
                changes["percentage"] = max(0, min(100, percentage))
            if error is not None:
                changes["error"] = error
            updated = replace(record, **changes)
            self._records[action_id] = updated
            return updated

    def delete(self, action_id: int) -> bool:
        with self._lock:
            return self._records.pop(action_id, None) is not None

    def list_all(self) -> list[ActionRecord]:
        with self._lock:
            return list(self._records.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
