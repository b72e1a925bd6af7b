"""Append-only JSONL audit log shared by the tool server and the action worker."""

from __future__ import annotations

import json
import threading
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path

EVENT_REQUEST = "request"
EVENT_ACTION = "action"
EVENT_ICON = "icon"

_PLAIN_STRING_KEYS = frozenset({"iconKey", "targetId", "filePath", "type", "status", "name"})
_COUNTED_STRING_KEYS = frozenset({"content", "svg"})


@dataclass(slots=True, frozen=True)
class AuditEvent:
    """One sanitized log line: a tool request, an action outcome, or a per-icon failure."""

    timestamp: str
    kind: str
    subject: str
    reference: str
    ok: bool
    blocked: bool
    error_code: str | None
    metadata: dict[str, object]


def utc_timestamp() -> str:
    """Return an ISO-8601 UTC timestamp."""
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def sanitize_arguments(arguments: dict[str, object]) -> dict[str, object]:
    """Reduce arguments to loggable scalars; markup and nested documents become shapes."""
    sanitized: dict[str, object] = {}
    for key in sorted(arguments.keys()):
        value = arguments[key]
        if key in _PLAIN_STRING_KEYS and isinstance(value, str):
            sanitized[key] = value
            continue
        if key in _COUNTED_STRING_KEYS and isinstance(value, str):
            sanitized[f"{key}_length"] = len(value)
            continue
        if isinstance(value, (int, float, bool)) or value is None:
            sanitized[key] = value
            continue
        if isinstance(value, str):
            sanitized[f"{key}_present"] = True
            sanitized[f"{key}_length"] = len(value)
            continue
        if isinstance(value, list):
            sanitized[f"{key}_type"] = "list"
            sanitized[f"{key}_length"] = len(value)
            continue
        if isinstance(value, dict):
            sanitized[f"{key}_type"] = "dict"
            sanitized[f"{key}_keys"] = sorted(str(k) for k in value.keys())
            continue
        sanitized[f"{key}_type"] = type(value).__name__
    return sanitized


class JsonlAuditLogger:
    """Append-only JSONL audit logger and bounded reader."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._write_lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def append(self, event: AuditEvent) -> None:
        """Append one event as a JSON object per line."""
        line = json.dumps(asdict(event), sort_keys=True)
        with self._write_lock:
            with self._path.open("a", encoding="utf-8") as handle:
                handle.write(line)
                handle.write("\n")

    def record(
        self,
        kind: str,
        subject: str,
        reference: str,
        *,
        ok: bool,
        blocked: bool = False,
        error_code: str | None = None,
        metadata: dict[str, object] | None = None,
    ) -> None:
        """Build and append an event stamped with the current time."""
        self.append(
            AuditEvent(
                timestamp=utc_timestamp(),
                kind=kind,
                subject=subject,
                reference=reference,
                ok=ok,
                blocked=blocked,
                error_code=error_code,
                metadata=metadata or {},
            )
        )

    def read(self, since: str | None = None, limit: int = 50) -> list[dict[str, object]]:
        """Read recent events, optionally filtered by timestamp lower bound."""
        if limit < 1:
            return []
        entries: list[dict[str, object]] = []
        if not self._path.exists():
            return entries
        with self._path.open("r", encoding="utf-8") as handle:
            for line in handle:
                stripped = line.strip()
                if not stripped:
                    continue
                try:
                    record = json.loads(stripped)
                except json.JSONDecodeError:
                    continue
                if since is not None:
                    ts = record.get("timestamp")
                    if not isinstance(ts, str) or ts < since:
                        continue
                entries.append(record)
        if len(entries) <= limit:
            return entries
        return entries[-limit:]
