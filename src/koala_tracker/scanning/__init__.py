"""
Scanning package for building directory snapshots.

Counts lines, probes individual files, and scans a directory into a
Snapshot using a bounded worker pool.
"""

from .directory_scanner import DirectoryScanner
from .file_prober import FileProber, is_transient_lock_error
from .line_counter import LineCounter

__all__ = [
    "LineCounter",
    "FileProber",
    "DirectoryScanner",
    "is_transient_lock_error",
]
