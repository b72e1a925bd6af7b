"""Target adapters that emit platform artifacts per icon."""

from .base import TargetAdapter
from .react import ReactComponentAdapter, ReactNativeComponentAdapter, component_name
from .registry import TargetRegistry
from .runtime import build_target_registry

__all__ = [
    "ReactComponentAdapter",
    "ReactNativeComponentAdapter",
    "TargetAdapter",
    "TargetRegistry",
    "build_target_registry",
    "component_name",
]
