"""
Custom exception classes for the koala tracker.

Provides specific exception types for the scanning, tracking and monitoring
stages so callers can decide which failures are recoverable.
"""

from typing import Any


class BaseError(Exception):
    """
    Base exception class for all koala tracker errors.

    All custom exceptions in the system inherit from this base class
    to enable consistent error handling and logging.
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        """
        Initialize the tracker error.

        Args:
            message: Human-readable error description
            error_code: Optional error code for programmatic handling
            context: Optional dictionary with error context information
            cause: Optional underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}
        self.cause = cause

    def __str__(self) -> str:
        """String representation including error code if present."""
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message

    def __repr__(self) -> str:
        """Detailed representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message='{self.message}', "
            f"error_code='{self.error_code}', "
            f"context={self.context})"
        )


class ConfigurationError(BaseError):
    """Raised when there are configuration or settings issues."""

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        expected_type: str | None = None,
        actual_value: Any | None = None,
    ):
        context = {}
        if config_key:
            context["config_key"] = config_key
        if expected_type:
            context["expected_type"] = expected_type
        if actual_value is not None:
            context["actual_value"] = str(actual_value)

        super().__init__(message, error_code="CONFIG_ERROR", context=context)


class InvalidInvocationError(BaseError):
    """Raised when the command line does not name an existing directory and a pattern."""

    def __init__(
        self,
        message: str,
        directory: str | None = None,
        pattern: str | None = None,
    ):
        context = {}
        if directory:
            context["directory"] = directory
        if pattern:
            context["pattern"] = pattern

        super().__init__(message, error_code="INVOCATION_ERROR", context=context)


class ProbeError(BaseError):
    """Raised when a single file cannot be probed for its modification time or line count."""

    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        underlying_error: Exception | None = None,
        error_code: str = "PROBE_ERROR",
    ):
        context = {}
        if file_path:
            context["file_path"] = file_path

        super().__init__(message, error_code=error_code, context=context, cause=underlying_error)

    @property
    def file_path(self) -> str | None:
        return self.context.get("file_path")


class TransientLockError(ProbeError):
    """Raised when a file is held exclusively by another process at probe time."""

    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        underlying_error: Exception | None = None,
    ):
        super().__init__(
            message,
            file_path=file_path,
            underlying_error=underlying_error,
            error_code="TRANSIENT_LOCK",
        )


class ScanError(BaseError):
    """Raised when a directory scan cannot produce a complete snapshot."""

    def __init__(
        self,
        message: str,
        directory: str | None = None,
        pattern: str | None = None,
        underlying_error: Exception | None = None,
        error_code: str = "SCAN_ERROR",
    ):
        context = {}
        if directory:
            context["directory"] = directory
        if pattern:
            context["pattern"] = pattern

        super().__init__(message, error_code=error_code, context=context, cause=underlying_error)


class KeyCollisionError(ScanError):
    """Raised when two files in one listing share a case-insensitive key."""

    def __init__(self, message: str, key: str, names: list[str] | None = None):
        super().__init__(message, error_code="KEY_COLLISION")
        self.context["key"] = key
        if names:
            self.context["names"] = list(names)


class ScanCancelledError(ScanError):
    """Raised when shutdown is requested while a scan is still probing files."""

    def __init__(self, message: str, directory: str | None = None, pending: int | None = None):
        super().__init__(message, directory=directory, error_code="SCAN_CANCELLED")
        if pending is not None:
            self.context["pending_probes"] = pending


class MonitoringError(BaseError):
    """Raised when starting or stopping directory monitoring fails."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        operation: str | None = None,
        underlying_error: Exception | None = None,
    ):
        context = {}
        if path:
            context["path"] = path
        if operation:
            context["operation"] = operation

        super().__init__(
            message,
            error_code="MONITORING_ERROR",
            context=context,
            cause=underlying_error,
        )


class ShutdownError(BaseError):
    """Raised when the poll loop does not stop within its grace period."""

    def __init__(
        self,
        message: str,
        component: str | None = None,
        shutdown_stage: str | None = None,
        underlying_error: Exception | None = None,
    ):
        context = {}
        if component:
            context["component"] = component
        if shutdown_stage:
            context["shutdown_stage"] = shutdown_stage

        super().__init__(
            message,
            error_code="SHUTDOWN_ERROR",
            context=context,
            cause=underlying_error,
        )


# Convenience functions for common error scenarios
def raise_config_error(
    message: str,
    config_key: str,
    expected_type: str | None = None,
    actual_value: Any | None = None,
) -> None:
    """Raise a configuration error with context."""
    raise ConfigurationError(
        message=message,
        config_key=config_key,
        expected_type=expected_type,
        actual_value=actual_value,
    )
