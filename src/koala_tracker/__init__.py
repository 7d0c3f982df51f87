"""
Koala tracker.

Polls a directory for files matching a pattern and reports which files were
added, removed or altered (by modification time and line count) since the
previous check.
"""

__version__ = "0.1.0"
