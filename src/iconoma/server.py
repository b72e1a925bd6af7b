"""JSON-lines studio server entrypoint."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import TextIO

from iconoma.actions.executor import error_code_for
from iconoma.errors import IconomaError
from iconoma.logging import sanitize_arguments
from iconoma.logging.audit import EVENT_REQUEST
from iconoma.security import PathBlockedError
from iconoma.service import StudioService
from iconoma.settings import (
    SettingsOverrides,
    StudioSettings,
    default_project_root,
    load_effective_settings,
)
from iconoma.tools.builtin import register_builtin_tools
from iconoma.tools.registry import ToolDispatchError, ToolRegistry

Envelope = dict[str, object]


def envelope(
    request_id: str,
    *,
    result: dict[str, object] | None = None,
    code: str | None = None,
    message: str = "",
    blocked: bool = False,
) -> Envelope:
    """Build the response object; ``code`` marks a failure."""
    response: Envelope = {
        "request_id": request_id,
        "ok": code is None,
        "result": result or {},
        "warnings": [],
        "blocked": blocked,
    }
    if code is not None:
        response["error"] = {"code": code, "message": message}
    return response


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for server startup settings."""
    parser = argparse.ArgumentParser(prog="iconoma-studio")
    parser.add_argument("--project-root", required=False, default=None)
    parser.add_argument("--data-dir", required=False, default=None)
    parser.add_argument("--config-file", required=False, default=None)
    parser.add_argument("--lock-file", required=False, default=None)
    parser.add_argument("--audit-log", choices=("true", "false"), required=False, default=None)
    return parser


class StudioServer:
    """Routes JSON-line tool requests to the studio service.

    A request is ``{"id", "method", "params"}``. ``method`` names a tool
    directly, or is ``tools/call`` with ``params.name`` and
    ``params.arguments``. Every request, valid or not, is audited once.
    """

    def __init__(self, settings: StudioSettings, service: StudioService | None = None) -> None:
        self._settings = settings
        self._service = service or StudioService(settings)
        self._registry = ToolRegistry()
        register_builtin_tools(
            self._registry,
            service=self._service,
            read_audit_entries=self._read_audit_entries,
        )
        self._fallback_ids = 0

    @property
    def service(self) -> StudioService:
        return self._service

    @property
    def tool_names(self) -> tuple[str, ...]:
        return self._registry.names()

    def serve(self, in_stream: TextIO, out_stream: TextIO) -> None:
        for raw_line in in_stream:
            line = raw_line.strip()
            if not line:
                continue
            response = self.handle_json_line(line)
            out_stream.write(f"{json.dumps(response, sort_keys=True)}\n")
            out_stream.flush()

    def close(self) -> None:
        """Let queued actions finish, then stop the worker."""
        self._service.close()

    def handle_json_line(self, raw_line: str) -> Envelope:
        try:
            payload = json.loads(raw_line)
        except json.JSONDecodeError:
            response = envelope(
                self._next_id(), code="INVALID_JSON", message="Request must be valid JSON."
            )
            self._audit("invalid_json", {"raw_line_length": len(raw_line)}, response)
            return response
        return self.handle_payload(payload)

    def handle_payload(self, payload: object) -> Envelope:
        if not isinstance(payload, dict):
            response = envelope(
                self._next_id(), code="INVALID_REQUEST", message="Request must be an object."
            )
            self._audit("invalid_request", {}, response)
            return response

        request_id = self._request_id(payload.get("id"))
        try:
            tool_name, arguments = self._resolve_call(payload)
        except ToolDispatchError as error:
            response = envelope(request_id, code=error.code, message=error.message)
            self._audit("invalid_request", {}, response)
            return response

        response = self._dispatch(request_id, tool_name, arguments)
        self._audit(tool_name, arguments, response)
        return response

    @staticmethod
    def _resolve_call(payload: dict[str, object]) -> tuple[str, dict[str, object]]:
        method = payload.get("method")
        params = payload.get("params", {})
        if not isinstance(method, str) or not method:
            raise ToolDispatchError(
                code="INVALID_REQUEST", message="Request method must be a non-empty string."
            )
        if not isinstance(params, dict):
            raise ToolDispatchError(
                code="INVALID_PARAMS", message="Request params must be an object."
            )
        if method != "tools/call":
            return method, params
        name = params.get("name")
        arguments = params.get("arguments", {})
        if not isinstance(name, str) or not name:
            raise ToolDispatchError(
                code="INVALID_PARAMS", message="tools/call params.name must be a non-empty string."
            )
        if not isinstance(arguments, dict):
            raise ToolDispatchError(
                code="INVALID_PARAMS", message="tools/call params.arguments must be an object."
            )
        return name, arguments

    def _dispatch(self, request_id: str, tool_name: str, arguments: dict[str, object]) -> Envelope:
        try:
            result = self._registry.dispatch(name=tool_name, arguments=arguments)
        except PathBlockedError as error:
            return envelope(
                request_id,
                result={"reason": error.reason, "hint": error.hint},
                code=error_code_for(error),
                message=error.reason,
                blocked=True,
            )
        except ToolDispatchError as error:
            return envelope(request_id, code=error.code, message=error.message)
        except IconomaError as error:
            return envelope(request_id, code=error.code, message=error.message)
        except ValueError as error:
            return envelope(request_id, code="INVALID_PARAMS", message=str(error))
        except Exception:
            return envelope(
                request_id,
                code="INTERNAL_ERROR",
                message="Unhandled server error while executing tool.",
            )
        return envelope(request_id, result=result)

    def _request_id(self, value: object) -> str:
        if isinstance(value, str) and value:
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return self._next_id()

    def _next_id(self) -> str:
        self._fallback_ids += 1
        return f"req-{self._fallback_ids:06d}"

    def _audit(self, tool_name: str, arguments: dict[str, object], response: Envelope) -> None:
        logger = self._service.audit_logger
        if logger is None:
            return
        error = response.get("error")
        logger.record(
            EVENT_REQUEST,
            tool_name,
            str(response["request_id"]),
            ok=response["ok"] is True,
            blocked=response["blocked"] is True,
            error_code=error.get("code") if isinstance(error, dict) else None,
            metadata=sanitize_arguments(arguments),
        )

    def _read_audit_entries(self, since: str | None, limit: int) -> list[dict[str, object]]:
        logger = self._service.audit_logger
        if logger is None:
            return []
        return logger.read(since=since, limit=limit)


def create_server(
    project_root: str | None = None,
    overrides: SettingsOverrides | None = None,
) -> StudioServer:
    """Create a configured studio server instance."""
    root = Path(project_root) if project_root is not None else default_project_root()
    settings = load_effective_settings(project_root=root, overrides=overrides)
    return StudioServer(settings=settings)


def main(argv: list[str] | None = None) -> int:
    """Entrypoint for the studio server process."""
    args = build_arg_parser().parse_args(argv)
    audit_log_enabled = None if args.audit_log is None else args.audit_log == "true"
    overrides = SettingsOverrides(
        data_dir=Path(args.data_dir).resolve() if args.data_dir is not None else None,
        config_file=args.config_file,
        lock_file=args.lock_file,
        audit_log_enabled=audit_log_enabled,
    )
    server = create_server(project_root=args.project_root, overrides=overrides)
    try:
        server.serve(in_stream=sys.stdin, out_stream=sys.stdout)
    finally:
        server.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
