"""Single-worker FIFO action queue."""

from __future__ import annotations

import queue
import threading
from typing import Protocol

from iconoma.actions.changes import Change, change_to_payload
from iconoma.actions.executor import ProgressCallback, error_code_for
from iconoma.actions.records import ActionRecord, ActionStatus, ActionTable
from iconoma.logging.audit import EVENT_ACTION, JsonlAuditLogger, sanitize_arguments


class ChangeExecutor(Protocol):
    def execute(self, change: Change, progress: ProgressCallback | None = None) -> list[Change]:
        """Apply a change and return follow-up changes to enqueue."""


class ActionQueue:
    """Runs submitted changes one at a time, in submission order, on one worker thread.

    A failing action is recorded as ``failed`` and the worker moves on.
    Follow-up changes returned by a handler are enqueued once the parent
    action is recorded as completed, so ``join`` also waits for them. An
    action whose handler reported progress keeps its last reported
    percentage on completion; any other action completes at 100.
    """

    def __init__(
        self,
        table: ActionTable,
        executor: ChangeExecutor,
        audit_logger: JsonlAuditLogger | None = None,
    ) -> None:
        self._table = table
        self._executor = executor
        self._audit_logger = audit_logger
        self._pending: queue.Queue[int | None] = queue.Queue()
        self._closed = False
        self._worker = threading.Thread(target=self._run, name="iconoma-actions", daemon=True)
        self._worker.start()

    @property
    def table(self) -> ActionTable:
        return self._table

    def submit(self, change: Change) -> int:
        if self._closed:
            raise RuntimeError("Action queue is closed.")
        action_id = self._table.create(change)
        self._pending.put(action_id)
        return action_id

    def get(self, action_id: int) -> ActionRecord | None:
        return self._table.get(action_id)

    def list_all(self) -> list[ActionRecord]:
        return self._table.list_all()

    def join(self) -> None:
        """Block until every submitted action, follow-ups included, is terminal."""
        self._pending.join()

    def close(self) -> None:
        """Stop accepting work, let queued actions finish, then stop the worker."""
        if self._closed:
            return
        self._closed = True
        self._pending.put(None)
        self._worker.join()

    def _run(self) -> None:
        while True:
            action_id = self._pending.get()
            try:
                if action_id is None:
                    return
                self._process(action_id)
            finally:
                self._pending.task_done()

    def _process(self, action_id: int) -> None:
        record = self._table.get(action_id)
        if record is None:
            return

        def progress(percentage: int) -> None:
            self._table.update(action_id, status=ActionStatus.PROCESSING, percentage=percentage)

        try:
            follow_ups = self._executor.execute(record.change, progress)
        except Exception as error:
            message = str(error) or type(error).__name__
            self._table.update(action_id, status=ActionStatus.FAILED, error=message)
            self._log(action_id, record.change, ok=False, error=error)
            return

        current = self._table.get(action_id)
        if current is not None and current.status is ActionStatus.PROCESSING:
            # Handlers that report progress own the final percentage.
            self._table.update(action_id, status=ActionStatus.COMPLETED)
        else:
            self._table.update(action_id, status=ActionStatus.COMPLETED, percentage=100)
        self._log(action_id, record.change, ok=True)
        for change in follow_ups:
            action = self._table.create(change)
            self._pending.put(action)

    def _log(
        self, action_id: int, change: Change, *, ok: bool, error: Exception | None = None
    ) -> None:
        if self._audit_logger is None:
            return
        metadata = sanitize_arguments(change_to_payload(change))
        if error is not None:
            metadata["error"] = str(error)
        self._audit_logger.record(
            EVENT_ACTION,
            change.type,
            str(action_id),
            ok=ok,
            error_code=None if error is None else error_code_for(error),
            metadata=metadata,
        )
