"""Snapshot comparison and master state ownership."""

from .diff_engine import compute_diff
from .state_store import EventListener, StateStore

__all__ = [
    "compute_diff",
    "StateStore",
    "EventListener",
]
