"""Data models and error types for the tracker."""

from koala_tracker.models.changes import ChangeSet, ChangeType, FileChangeEvent
from koala_tracker.models.exceptions import (
    BaseError,
    ConfigurationError,
    InvalidInvocationError,
    KeyCollisionError,
    MonitoringError,
    ProbeError,
    ScanCancelledError,
    ScanError,
    ShutdownError,
    TransientLockError,
)
from koala_tracker.models.file_record import FileRecord, KeyCollisionPolicy, Snapshot, make_key

__all__ = [
    "FileRecord",
    "Snapshot",
    "KeyCollisionPolicy",
    "make_key",
    "ChangeSet",
    "ChangeType",
    "FileChangeEvent",
    "BaseError",
    "ConfigurationError",
    "InvalidInvocationError",
    "ProbeError",
    "TransientLockError",
    "ScanError",
    "KeyCollisionError",
    "ScanCancelledError",
    "MonitoringError",
    "ShutdownError",
]
