"""Error taxonomy shared by stores, handlers, and tool surfaces."""

from __future__ import annotations


class IconomaError(Exception):
    """Base error carrying a stable machine-readable code."""

    code = "ICONOMA_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(IconomaError):
    """A prerequisite record (config, lock, icon, adapter) is absent."""

    code = "NOT_FOUND"


class ConfigMissingError(NotFoundError):
    def __init__(self) -> None:
        super().__init__("Config not found; write a config before running actions.")


class LockMissingError(NotFoundError):
    def __init__(self) -> None:
        super().__init__("Lock file not found.")


class IconNotFoundError(NotFoundError):
    def __init__(self, icon_key: str) -> None:
        super().__init__(f"Icon {icon_key} not found in lock file.")
        self.icon_key = icon_key


class AdapterNotFoundError(NotFoundError):
    def __init__(self, target_id: str) -> None:
        super().__init__(f"No target adapter registered for '{target_id}'.")
        self.target_id = target_id


class FileMissingError(IconomaError):
    """An on-disk artifact the lock points at does not exist."""

    code = "FILE_MISSING"

    def __init__(self, path: str) -> None:
        super().__init__(f"File {path} does not exist.")
        self.path = path


class ValidationError(IconomaError):
    """Malformed input: change payloads, config documents, SVG markup."""

    code = "VALIDATION_ERROR"


class AdapterError(IconomaError):
    """Opaque failure raised from inside a target adapter."""

    code = "ADAPTER_ERROR"

    def __init__(self, target_id: str, detail: str) -> None:
        super().__init__(f"Target '{target_id}' failed: {detail}")
        self.target_id = target_id
