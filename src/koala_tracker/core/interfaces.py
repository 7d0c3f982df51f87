"""
Abstract interfaces for the koala tracker.

These interfaces define the contracts for the scanning components, enabling
dependency injection for testing and alternative implementations.
"""

import threading
from abc import ABC, abstractmethod
from pathlib import Path

from koala_tracker.models import FileRecord, Snapshot


class ILineCounter(ABC):
    """Interface for estimating the number of lines in a file."""

    @abstractmethod
    def count_lines(self, file_path: Path) -> int:
        """
        Count the lines in a file.

        Args:
            file_path: Path to the file to read

        Returns:
            Non-negative line count estimate

        Raises:
            OSError: If the file cannot be read
        """
        pass


class IFileProber(ABC):
    """Interface for building the record that describes a single file."""

    @abstractmethod
    def probe(self, file_path: Path) -> FileRecord:
        """
        Read the modification time and line count of a file.

        Args:
            file_path: Path to the file to probe

        Returns:
            FileRecord for the file

        Raises:
            TransientLockError: If another process holds the file exclusively
            ProbeError: If the file cannot be read for any other reason
        """
        pass


class IDirectoryScanner(ABC):
    """Interface for producing a snapshot of matching files in a directory."""

    @abstractmethod
    def scan(self, directory: Path, pattern: str, cancel_event: threading.Event | None = None) -> Snapshot:
        """
        Scan a directory for files matching a pattern.

        Args:
            directory: Directory to list (not recursed)
            pattern: Glob-style file name filter
            cancel_event: Optional event that aborts the scan when set

        Returns:
            Snapshot of every matching file that could be probed

        Raises:
            ScanError: If the scan cannot produce a complete snapshot
        """
        pass
