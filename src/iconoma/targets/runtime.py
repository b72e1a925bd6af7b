"""Runtime target registry construction."""

from __future__ import annotations

from iconoma.settings import StudioSettings
from iconoma.targets.react import ReactComponentAdapter, ReactNativeComponentAdapter, ReadSvg
from iconoma.targets.registry import TargetRegistry


def build_target_registry(settings: StudioSettings, read_svg: ReadSvg) -> TargetRegistry:
    """Build the registry of built-in target adapters."""
    registry = TargetRegistry()
    registry.register(ReactComponentAdapter(settings.project_root, read_svg))
    registry.register(ReactNativeComponentAdapter(settings.project_root, read_svg))
    return registry
