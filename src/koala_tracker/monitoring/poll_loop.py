"""
Fixed-interval poll loop.

Runs scan, diff and apply cycles one at a time. The next check time is only
computed after a cycle has fully completed, so scans never overlap and the
interval is measured from the end of the previous scan.
"""

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from koala_tracker.core.interfaces import IDirectoryScanner
from koala_tracker.models import ChangeSet, ScanCancelledError, ScanError
from koala_tracker.tracking import StateStore, compute_diff

logger = logging.getLogger(__name__)


class LoopState(str, Enum):
    """Lifecycle states of the poll loop."""

    IDLE = "idle"
    SCANNING = "scanning"
    STOPPED = "stopped"


@dataclass
class ScheduleState:
    """When the next scan is due, in monotonic clock seconds."""

    interval_seconds: float
    next_check_at: float = 0.0

    def is_due(self, now: float) -> bool:
        return now >= self.next_check_at

    def schedule_next(self, now: float) -> None:
        self.next_check_at = now + self.interval_seconds


class PollLoop:
    """
    Periodically scans a directory and applies the changes to a state store.

    The loop is stopped cooperatively: ``stop()`` sets a flag checked between
    cycles and passed to the scanner, then waits a bounded time for the
    worker thread to exit.
    """

    def __init__(
        self,
        directory: Path,
        pattern: str,
        scanner: IDirectoryScanner,
        store: StateStore,
        interval_seconds: float = 10.0,
        poll_granularity_seconds: float = 0.1,
        clock: Callable[[], float] = time.monotonic,
        on_cycle_complete: Callable[[ChangeSet], None] | None = None,
        on_cycle_failed: Callable[[Exception], None] | None = None,
    ):
        """
        Initialize the poll loop.

        Args:
            directory: Directory to scan
            pattern: Glob-style file name filter
            scanner: Scanner producing snapshots
            store: Owner of the master state
            interval_seconds: Delay between the end of one cycle and the next check
            poll_granularity_seconds: Sleep between clock checks while idle
            clock: Monotonic time source
            on_cycle_complete: Callback with the applied changes of each successful cycle
            on_cycle_failed: Callback with the error of each abandoned cycle
        """
        self.directory = directory
        self.pattern = pattern
        self.scanner = scanner
        self.store = store
        self.poll_granularity_seconds = poll_granularity_seconds
        self.on_cycle_complete = on_cycle_complete
        self.on_cycle_failed = on_cycle_failed

        self._clock = clock
        self._schedule = ScheduleState(interval_seconds=interval_seconds)
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._state = LoopState.IDLE

    @property
    def state(self) -> LoopState:
        return self._state

    @property
    def schedule(self) -> ScheduleState:
        return self._schedule

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def initial_scan(self) -> None:
        """
        Replace the master state with a synchronous full scan.

        Raises:
            ScanError: If the directory cannot be scanned
        """
        logger.info("Performing initial scan of %s for %s", self.directory, self.pattern)
        snapshot = self.scanner.scan(self.directory, self.pattern)
        self.store.apply_initial(snapshot)
        logger.info("Initial scan complete: %d files found", len(snapshot))

    def run_cycle(self) -> ChangeSet | None:
        """
        Perform one scan, diff and apply cycle.

        A failed scan is logged and abandoned, whatever the error; the
        master state is only mutated once a scan has fully succeeded.

        Returns:
            The applied changes, or None if the cycle was abandoned
        """
        self._state = LoopState.SCANNING
        try:
            current = self.scanner.scan(self.directory, self.pattern, cancel_event=self._stop_event)
            changes = compute_diff(self.store.snapshot(), current)
            self.store.apply_diff(changes)
        except ScanCancelledError as e:
            logger.info("Scan cancelled by shutdown: %s", e)
            return None
        except ScanError as e:
            logger.error("Scan cycle abandoned: %s", e)
            if self.on_cycle_failed:
                self.on_cycle_failed(e)
            return None
        except Exception as e:
            logger.exception("Unexpected error during scan cycle: %s", e)
            if self.on_cycle_failed:
                self.on_cycle_failed(e)
            return None
        finally:
            self._state = LoopState.IDLE

        logger.debug("Scan cycle complete: %s", changes)
        if self.on_cycle_complete:
            self.on_cycle_complete(changes)
        return changes

    def run(self) -> None:
        """Run cycles until stopped. Blocks the calling thread."""
        self._schedule.schedule_next(self._clock())
        self._state = LoopState.IDLE
        try:
            while not self._stop_event.is_set():
                if self._schedule.is_due(self._clock()):
                    self.run_cycle()
                    self._schedule.schedule_next(self._clock())
                self._stop_event.wait(self.poll_granularity_seconds)
        finally:
            self._state = LoopState.STOPPED
            logger.info("Poll loop stopped")

    def start(self) -> None:
        """Run the loop on a background thread."""
        if self.is_running:
            logger.debug("Poll loop already running")
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self.run, name="koala-poll-loop", daemon=True)
        self._thread.start()
        logger.info("Poll loop started (interval: %ss)", self._schedule.interval_seconds)

    def stop(self, timeout: float | None = 5.0) -> bool:
        """
        Request the loop to stop and wait for it.

        Args:
            timeout: Grace period in seconds for an in-flight cycle (None waits forever)

        Returns:
            True if the loop thread has exited
        """
        self._stop_event.set()
        if self._thread is None:
            self._state = LoopState.STOPPED
            return True

        self._thread.join(timeout=timeout)
        if self._thread.is_alive():
            logger.warning("Poll loop did not stop within %ss", timeout)
            return False

        self._thread = None
        return True
