"""Core contracts shared by the scanning and monitoring components."""

from koala_tracker.core.interfaces import IDirectoryScanner, IFileProber, ILineCounter

__all__ = [
    "ILineCounter",
    "IFileProber",
    "IDirectoryScanner",
]
