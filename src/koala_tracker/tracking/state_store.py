"""
Thread-safe owner of the master snapshot.

The master state is the last known state of the watched directory. It is
only mutated here, under a single lock covering the whole map, and is
never handed out by reference.
"""

import logging
import threading
from collections.abc import Callable

from koala_tracker.models import ChangeSet, ChangeType, FileChangeEvent, FileRecord, Snapshot

logger = logging.getLogger(__name__)

EventListener = Callable[[FileChangeEvent], None]


class StateStore:
    """
    Holds the master snapshot and applies classified changes to it.

    Each apply call emits its events to registered listeners once the
    update is complete and the lock has been released.
    """

    def __init__(self, listeners: list[EventListener] | None = None):
        self._lock = threading.Lock()
        self._records: dict[str, FileRecord] = {}
        self._listeners: list[EventListener] = list(listeners or [])

    def add_listener(self, listener: EventListener) -> None:
        """Register a callback invoked with every emitted event."""
        self._listeners.append(listener)

    def snapshot(self) -> Snapshot:
        """Return a stable copy of the master state."""
        with self._lock:
            records = dict(self._records)
        return Snapshot(records=records)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def apply_initial(self, snapshot: Snapshot) -> list[FileChangeEvent]:
        """
        Replace the master state wholesale with the result of the initial scan.

        Args:
            snapshot: Full snapshot of the directory

        Returns:
            One FOUND event per record, ordered by key
        """
        with self._lock:
            self._records = snapshot.copy_records()

        events = [
            FileChangeEvent(change_type=ChangeType.FOUND, name=record.name, record=record)
            for record in snapshot.iter_records()
        ]
        self._emit(events)
        return events

    def apply_diff(self, changes: ChangeSet) -> list[FileChangeEvent]:
        """
        Apply removals, additions and updates to the master state.

        Args:
            changes: Classified changes computed against a copy of the master state

        Returns:
            REMOVED events, then ADDED events, then ALTERED events
        """
        removed_events = []
        added_events = []
        altered_events = []

        with self._lock:
            for record in changes.removed:
                previous = self._records.pop(record.key, record)
                removed_events.append(
                    FileChangeEvent(change_type=ChangeType.REMOVED, name=previous.name, record=previous)
                )

            for record in changes.added:
                self._records[record.key] = record
                added_events.append(FileChangeEvent(change_type=ChangeType.ADDED, name=record.name, record=record))

            for record in changes.updated:
                previous = self._records.get(record.key)
                delta = record.line_count - previous.line_count if previous is not None else record.line_count
                self._records[record.key] = record
                altered_events.append(
                    FileChangeEvent(
                        change_type=ChangeType.ALTERED,
                        name=record.name,
                        record=record,
                        line_delta=delta,
                    )
                )

        events = removed_events + added_events + altered_events
        if events:
            logger.info(
                "Applied changes: %d removed, %d added, %d altered",
                len(removed_events),
                len(added_events),
                len(altered_events),
            )
        self._emit(events)
        return events

    def _emit(self, events: list[FileChangeEvent]) -> None:
        for event in events:
            for listener in self._listeners:
                try:
                    listener(event)
                except Exception as e:
                    logger.error("Error dispatching %s event for %s: %s", event.change_type.value, event.name, e)
