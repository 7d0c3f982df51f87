"""Builds the FileRecord describing a single file."""

import errno
import logging
from datetime import UTC, datetime
from pathlib import Path

from pydantic import ValidationError

from koala_tracker.core.interfaces import IFileProber, ILineCounter
from koala_tracker.models import FileRecord, ProbeError, TransientLockError
from koala_tracker.scanning.line_counter import LineCounter

logger = logging.getLogger(__name__)

# Windows ERROR_SHARING_VIOLATION and ERROR_LOCK_VIOLATION
_WINDOWS_LOCK_ERRORS = frozenset({32, 33})
_POSIX_LOCK_ERRNOS = frozenset({errno.EAGAIN, errno.EWOULDBLOCK, errno.EBUSY, errno.EDEADLK})


def is_transient_lock_error(error: BaseException) -> bool:
    """
    Check whether an I/O error means another process holds the file exclusively.

    Args:
        error: Exception raised while opening or reading a file

    Returns:
        True if retrying on a later scan is expected to succeed
    """
    if not isinstance(error, OSError):
        return False
    if getattr(error, 'winerror', None) in _WINDOWS_LOCK_ERRORS:
        return True
    return error.errno in _POSIX_LOCK_ERRNOS


class FileProber(IFileProber):
    """Reads modification time and line count for one file."""

    def __init__(self, line_counter: ILineCounter | None = None):
        self.line_counter = line_counter or LineCounter()

    def probe(self, file_path: Path) -> FileRecord:
        try:
            modified_at = datetime.fromtimestamp(file_path.stat().st_mtime, tz=UTC)
            line_count = self.line_counter.count_lines(file_path)
        except OSError as e:
            if is_transient_lock_error(e):
                raise TransientLockError(
                    f"File is in use by another process: {file_path}",
                    file_path=str(file_path),
                    underlying_error=e,
                ) from e
            raise ProbeError(
                f"Failed to probe {file_path}: {e}",
                file_path=str(file_path),
                underlying_error=e,
            ) from e

        try:
            return FileRecord(name=file_path.name, modified_at=modified_at, line_count=line_count)
        except ValidationError as e:
            # undecodable POSIX names carry surrogate escapes
            raise ProbeError(
                f"Cannot record {str(file_path)!r}: file name is not valid text",
                file_path=str(file_path),
                underlying_error=e,
            ) from e
