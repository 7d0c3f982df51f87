"""
Directory scanner producing full snapshots.

Lists the files in one directory that match a glob pattern and probes them
on a bounded thread pool. Files locked by another process are left out of
the snapshot and picked up on a later scan; any other probe failure aborts
the scan unless the scanner is configured to skip unreadable files.
"""

import fnmatch
import logging
import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from pathlib import Path

from koala_tracker.core.interfaces import IDirectoryScanner, IFileProber
from koala_tracker.models import (
    FileRecord,
    KeyCollisionPolicy,
    ProbeError,
    ScanCancelledError,
    ScanError,
    Snapshot,
    TransientLockError,
    make_key,
)
from koala_tracker.scanning.file_prober import FileProber

logger = logging.getLogger(__name__)


class DirectoryScanner(IDirectoryScanner):
    """
    Produces a Snapshot of the files in a directory that match a pattern.

    At most ``max_workers`` files are probed at the same time.
    """

    def __init__(
        self,
        prober: IFileProber | None = None,
        max_workers: int = 4,
        collision_policy: KeyCollisionPolicy = KeyCollisionPolicy.LAST_WINS,
        skip_unreadable_files: bool = False,
    ):
        """
        Initialize the scanner.

        Args:
            prober: File prober (a FileProber with default line counting if None)
            max_workers: Upper bound on concurrent probes
            collision_policy: Resolution for names differing only by case
            skip_unreadable_files: Omit files with non-transient probe errors
                instead of failing the scan
        """
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.prober = prober or FileProber()
        self.max_workers = max_workers
        self.collision_policy = collision_policy
        self.skip_unreadable_files = skip_unreadable_files

    def list_matching_files(self, directory: Path, pattern: str) -> list[Path]:
        """
        List regular files directly inside a directory whose names match a pattern.

        Matching ignores case on every platform, like file identity.

        Raises:
            ScanError: If the directory cannot be listed
        """
        key_pattern = make_key(pattern)
        try:
            with os.scandir(directory) as entries:
                matches = [
                    Path(entry.path)
                    for entry in entries
                    if entry.is_file() and fnmatch.fnmatchcase(make_key(entry.name), key_pattern)
                ]
        except OSError as e:
            raise ScanError(
                f"Failed to list directory {directory}: {e}",
                directory=str(directory),
                pattern=pattern,
                underlying_error=e,
            ) from e

        return sorted(matches)

    def scan(self, directory: Path, pattern: str, cancel_event: threading.Event | None = None) -> Snapshot:
        files = self.list_matching_files(directory, pattern)
        logger.debug("Probing %d files in %s matching %s", len(files), directory, pattern)

        if not files:
            return Snapshot()

        records: list[FileRecord] = []
        workers = min(self.max_workers, len(files))

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="koala-probe") as executor:
            futures: dict[Future, Path] = {executor.submit(self.prober.probe, path): path for path in files}

            try:
                for future in as_completed(futures):
                    if cancel_event is not None and cancel_event.is_set():
                        pending = sum(1 for f in futures if not f.done())
                        raise ScanCancelledError(
                            f"Scan of {directory} cancelled", directory=str(directory), pending=pending
                        )

                    record = self._collect(future, futures[future], directory, pattern)
                    if record is not None:
                        records.append(record)
            except ScanError:
                executor.shutdown(wait=False, cancel_futures=True)
                raise

        return Snapshot.from_records(records, collision_policy=self.collision_policy)

    def _collect(self, future: Future, path: Path, directory: Path, pattern: str) -> FileRecord | None:
        """
        Return the probed record, or None if the file is left out of this scan.

        Raises:
            ScanError: If the probe failed with a non-transient error
        """
        try:
            return future.result()
        except TransientLockError:
            logger.debug("Skipping locked file %s until the next scan", path)
            return None
        except ProbeError as e:
            if self.skip_unreadable_files:
                logger.warning("Skipping unreadable file: %s", e.message)
                return None
            raise ScanError(
                f"Scan of {directory} aborted: {e.message}",
                directory=str(directory),
                pattern=pattern,
                underlying_error=e,
            ) from e
