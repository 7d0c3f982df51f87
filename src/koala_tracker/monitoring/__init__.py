"""
Monitoring package for poll-based change detection.

This package provides the poll loop that periodically rescans a directory
and the coordinator that wires scanning, tracking and polling together.
"""

from .poll_loop import LoopState, PollLoop, ScheduleState
from .tracker_coordinator import TrackerCoordinator

__all__ = [
    "LoopState",
    "PollLoop",
    "ScheduleState",
    "TrackerCoordinator",
]
