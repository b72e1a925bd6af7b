"""Config transition diffing and staleness reporting."""

from .engine import StaleTarget, compute_changes, find_stale_targets, stale_changes

__all__ = ["StaleTarget", "compute_changes", "find_stale_targets", "stale_changes"]
