"""Config and lock persistence."""

from .documents import ConfigStore, LockStore, atomic_write_json, read_json_document
from .models import (
    FILE_PREFIX,
    BuiltFrom,
    Config,
    ExtraTarget,
    Icon,
    IconSvg,
    LockFile,
    SvgStorage,
    Target,
    canonical_json,
    sha256_text,
)

__all__ = [
    "BuiltFrom",
    "Config",
    "ConfigStore",
    "ExtraTarget",
    "FILE_PREFIX",
    "Icon",
    "IconSvg",
    "LockFile",
    "LockStore",
    "SvgStorage",
    "Target",
    "atomic_write_json",
    "canonical_json",
    "read_json_document",
    "sha256_text",
]
