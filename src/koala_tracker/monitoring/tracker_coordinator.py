"""
Tracker coordinator for poll-based directory monitoring.

Wires the scanner, state store and poll loop together from configuration,
performs the initial scan, and keeps statistics about observed changes.
"""

import logging
from pathlib import Path
from typing import Any

from koala_tracker.config import TrackerConfig
from koala_tracker.core.interfaces import IDirectoryScanner
from koala_tracker.models import ChangeSet, ChangeType, FileChangeEvent, MonitoringError, ShutdownError
from koala_tracker.monitoring.poll_loop import PollLoop
from koala_tracker.scanning import DirectoryScanner, FileProber, LineCounter
from koala_tracker.tracking import EventListener, StateStore

logger = logging.getLogger(__name__)


class TrackerCoordinator:
    """
    Coordinates directory scanning, change tracking and the poll loop.

    Owns the single StateStore for a monitoring session and forwards every
    event it emits to the registered listeners.
    """

    def __init__(
        self,
        config: TrackerConfig,
        scanner: IDirectoryScanner | None = None,
        store: StateStore | None = None,
        listeners: list[EventListener] | None = None,
    ):
        """
        Initialize the tracker coordinator.

        Args:
            config: Tracker configuration
            scanner: Optional directory scanner (built from config if not provided)
            store: Optional state store (a fresh one if not provided)
            listeners: Callbacks receiving every change event
        """
        self.config = config
        self.scanner = scanner or DirectoryScanner(
            prober=FileProber(LineCounter(chunk_size=config.read_chunk_size)),
            max_workers=config.max_probe_workers,
            collision_policy=config.key_collision_policy,
            skip_unreadable_files=config.skip_unreadable_files,
        )
        self.store = store or StateStore()
        self.store.add_listener(self._record_event)
        for listener in listeners or []:
            self.store.add_listener(listener)

        # Monitoring state
        self._poll_loop: PollLoop | None = None
        self._monitored_directory: Path | None = None
        self._pattern: str | None = None

        # Statistics tracking
        self._stats = {
            "cycles_completed": 0,
            "cycles_failed": 0,
            "events": {"found": 0, "added": 0, "altered": 0, "removed": 0},
            "errors": [],
        }

    def start_monitoring(self, directory_path: Path, pattern: str) -> None:
        """
        Scan a directory once and start polling it for changes.

        Args:
            directory_path: Directory to monitor
            pattern: Glob-style file name filter

        Raises:
            MonitoringError: If monitoring cannot be started
        """
        try:
            if self.is_monitoring:
                raise MonitoringError(
                    f"Already monitoring {self._monitored_directory}",
                    path=str(directory_path),
                    operation="start_monitoring",
                )

            directory_path = directory_path.resolve()
            if not directory_path.exists():
                raise MonitoringError(
                    f"Directory does not exist: {directory_path}",
                    path=str(directory_path),
                    operation="start_monitoring",
                )
            if not directory_path.is_dir():
                raise MonitoringError(
                    f"Path is not a directory: {directory_path}",
                    path=str(directory_path),
                    operation="start_monitoring",
                )

            logger.info("Starting monitoring for %s (pattern: %s)", directory_path, pattern)

            poll_loop = PollLoop(
                directory=directory_path,
                pattern=pattern,
                scanner=self.scanner,
                store=self.store,
                interval_seconds=self.config.check_interval_seconds,
                poll_granularity_seconds=self.config.poll_granularity_seconds,
                on_cycle_complete=self._handle_cycle_complete,
                on_cycle_failed=self._handle_cycle_failed,
            )
            poll_loop.initial_scan()
            poll_loop.start()

            self._poll_loop = poll_loop
            self._monitored_directory = directory_path
            self._pattern = pattern
            logger.info("Monitoring started successfully for: %s", directory_path)

        except MonitoringError:
            raise
        except Exception as e:
            logger.error("Failed to start monitoring for %s: %s", directory_path, e)
            raise MonitoringError(
                f"Failed to start monitoring: {e}",
                path=str(directory_path),
                operation="start_monitoring",
                underlying_error=e,
            ) from e

    def stop_monitoring(self) -> None:
        """
        Stop the poll loop, waiting up to the configured grace period.

        Raises:
            ShutdownError: If the loop is still running after the grace period
        """
        if self._poll_loop is None:
            logger.debug("Monitoring not active, nothing to stop")
            return

        logger.info("Stopping directory monitoring...")
        stopped = self._poll_loop.stop(timeout=self.config.shutdown_grace_seconds)
        if not stopped:
            raise ShutdownError(
                f"Poll loop still running after {self.config.shutdown_grace_seconds}s",
                component="poll_loop",
                shutdown_stage="join",
            )

        self._poll_loop = None
        self._monitored_directory = None
        self._pattern = None
        logger.info("Directory monitoring stopped successfully")

    def _record_event(self, event: FileChangeEvent) -> None:
        self._stats["events"][ChangeType(event.change_type).value] += 1

    def _handle_cycle_complete(self, changes: ChangeSet) -> None:
        self._stats["cycles_completed"] += 1

    def _handle_cycle_failed(self, error: Exception) -> None:
        """
        Record an abandoned scan cycle.

        Args:
            error: Error that aborted the cycle
        """
        self._stats["cycles_failed"] += 1
        self._stats["errors"].append(str(error))

        # Keep only the last 100 errors
        if len(self._stats["errors"]) > 100:
            self._stats["errors"] = self._stats["errors"][-100:]

    @property
    def is_monitoring(self) -> bool:
        """Check if the poll loop is currently running."""
        return self._poll_loop is not None and self._poll_loop.is_running

    @property
    def monitored_directory(self) -> Path | None:
        return self._monitored_directory

    def get_monitoring_stats(self) -> dict[str, Any]:
        """
        Get monitoring statistics.

        Returns:
            Dictionary with monitoring statistics
        """
        return {
            "monitoring_active": self.is_monitoring,
            "monitored_directory": str(self._monitored_directory) if self._monitored_directory else None,
            "pattern": self._pattern,
            "tracked_files": len(self.store),
            "poll_loop_state": self._poll_loop.state.value if self._poll_loop else None,
            "processing_stats": {
                "cycles_completed": self._stats["cycles_completed"],
                "cycles_failed": self._stats["cycles_failed"],
                "events": dict(self._stats["events"]),
                "errors": list(self._stats["errors"]),
            },
            "configuration": {
                "check_interval_seconds": self.config.check_interval_seconds,
                "max_probe_workers": self.config.max_probe_workers,
                "skip_unreadable_files": self.config.skip_unreadable_files,
            },
        }
