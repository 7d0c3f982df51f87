"""Unit tests for the directory scanner."""

import threading
from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import Mock

import pytest
from koala_tracker.core import IFileProber
from koala_tracker.models import (
    FileRecord,
    KeyCollisionError,
    KeyCollisionPolicy,
    ProbeError,
    ScanCancelledError,
    ScanError,
    TransientLockError,
)
from koala_tracker.scanning import DirectoryScanner

MODIFIED = datetime(2024, 1, 1, tzinfo=UTC)


def record_for(path: Path, line_count: int = 1) -> FileRecord:
    return FileRecord(name=path.name, modified_at=MODIFIED, line_count=line_count)


class TestDirectoryScanner:
    """Test cases for DirectoryScanner."""

    @pytest.fixture
    def watched_dir(self, tmp_path):
        """Create a directory with a mix of matching and non-matching entries."""
        (tmp_path / "a.txt").write_text("1\n2\n3\n")
        (tmp_path / "b.txt").write_text("only line")
        (tmp_path / "c.log").write_text("not matched\n")
        sub = tmp_path / "nested.txt"
        sub.mkdir()
        (sub / "d.txt").write_text("inside a subdirectory\n")
        return tmp_path

    def test_scan_empty_directory(self, tmp_path):
        """Test that an empty directory yields an empty snapshot."""
        snapshot = DirectoryScanner().scan(tmp_path, "*.txt")
        assert len(snapshot) == 0

    def test_scan_matches_pattern_non_recursive(self, watched_dir):
        """Test that only matching regular files directly in the directory are probed."""
        snapshot = DirectoryScanner().scan(watched_dir, "*.txt")

        assert snapshot.keys() == {"A.TXT", "B.TXT"}
        assert snapshot.get("A.TXT").line_count == 3
        assert snapshot.get("B.TXT").line_count == 1

    def test_list_matching_files_sorted(self, watched_dir):
        """Test that listings come back in name order."""
        files = DirectoryScanner().list_matching_files(watched_dir, "*")
        assert [f.name for f in files] == ["a.txt", "b.txt", "c.log"]

    def test_pattern_matching_ignores_case(self, tmp_path):
        """Test that the pattern matches names regardless of case."""
        (tmp_path / "NOTES.TXT").write_text("x\n")
        (tmp_path / "Mixed.Txt").write_text("x\n")
        (tmp_path / "other.log").write_text("x\n")

        lower = DirectoryScanner().list_matching_files(tmp_path, "*.txt")
        upper = DirectoryScanner().list_matching_files(tmp_path, "*.TXT")

        assert [f.name for f in lower] == ["Mixed.Txt", "NOTES.TXT"]
        assert [f.name for f in upper] == ["Mixed.Txt", "NOTES.TXT"]

    def test_list_missing_directory_raises(self, tmp_path):
        """Test that an unlistable directory fails the scan."""
        with pytest.raises(ScanError) as exc_info:
            DirectoryScanner().scan(tmp_path / "gone", "*.txt")

        assert exc_info.value.error_code == "SCAN_ERROR"
        assert isinstance(exc_info.value.cause, FileNotFoundError)

    def test_locked_file_is_omitted(self, watched_dir):
        """Test that a transiently locked file is silently left out."""
        prober = Mock(spec=IFileProber)

        def probe(path):
            if path.name == "a.txt":
                raise TransientLockError("in use", file_path=str(path))
            return record_for(path)

        prober.probe.side_effect = probe

        snapshot = DirectoryScanner(prober=prober).scan(watched_dir, "*.txt")

        assert snapshot.keys() == {"B.TXT"}

    def test_probe_error_aborts_scan(self, watched_dir):
        """Test that a non-transient probe error fails the whole scan."""
        prober = Mock(spec=IFileProber)

        def probe(path):
            if path.name == "b.txt":
                raise ProbeError("unreadable", file_path=str(path))
            return record_for(path)

        prober.probe.side_effect = probe

        with pytest.raises(ScanError) as exc_info:
            DirectoryScanner(prober=prober).scan(watched_dir, "*.txt")

        assert isinstance(exc_info.value.cause, ProbeError)
        assert "aborted" in str(exc_info.value)

    def test_probe_error_skipped_when_configured(self, watched_dir):
        """Test that unreadable files can be skipped instead of aborting."""
        prober = Mock(spec=IFileProber)

        def probe(path):
            if path.name == "b.txt":
                raise ProbeError("unreadable", file_path=str(path))
            return record_for(path)

        prober.probe.side_effect = probe

        snapshot = DirectoryScanner(prober=prober, skip_unreadable_files=True).scan(watched_dir, "*.txt")

        assert snapshot.keys() == {"A.TXT"}

    def test_vanished_file_aborts_scan(self, tmp_path):
        """Test that a file deleted between listing and probing fails the scan."""
        scanner = DirectoryScanner()
        (tmp_path / "a.txt").write_text("x\n")

        scanner.list_matching_files = Mock(return_value=[tmp_path / "a.txt", tmp_path / "ghost.txt"])

        with pytest.raises(ScanError):
            scanner.scan(tmp_path, "*.txt")

    def test_probes_bounded_by_max_workers(self, tmp_path):
        """Test that no more than max_workers probes run at once."""
        for i in range(12):
            (tmp_path / f"f{i}.txt").write_text("x\n")

        lock = threading.Lock()
        in_flight = 0
        peak = 0
        barrier_hit = threading.Event()

        def probe(path):
            nonlocal in_flight, peak
            with lock:
                in_flight += 1
                peak = max(peak, in_flight)
            barrier_hit.wait(0.01)
            with lock:
                in_flight -= 1
            return record_for(path)

        prober = Mock(spec=IFileProber)
        prober.probe.side_effect = probe

        snapshot = DirectoryScanner(prober=prober, max_workers=3).scan(tmp_path, "*.txt")

        assert len(snapshot) == 12
        assert 1 <= peak <= 3

    def test_invalid_max_workers(self):
        """Test that at least one worker is required."""
        with pytest.raises(ValueError):
            DirectoryScanner(max_workers=0)

    def test_cancel_event_aborts_scan(self, watched_dir):
        """Test that a set cancel event stops the scan."""
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(ScanCancelledError) as exc_info:
            DirectoryScanner().scan(watched_dir, "*.txt", cancel_event=cancel)

        assert exc_info.value.error_code == "SCAN_CANCELLED"

    def test_case_collision_last_wins(self, tmp_path):
        """Test that colliding names resolve to the ordinal-last name."""
        scanner = DirectoryScanner()
        paths = [tmp_path / "foo.txt", tmp_path / "FOO.TXT"]
        for path in paths:
            path.touch()
        scanner.list_matching_files = Mock(return_value=paths)
        prober = Mock(spec=IFileProber)
        prober.probe.side_effect = lambda path: record_for(path, line_count=len(path.name))
        scanner.prober = prober

        snapshot = scanner.scan(tmp_path, "*.txt")

        assert len(snapshot) == 1
        assert snapshot.get("FOO.TXT").name == "foo.txt"

    def test_case_collision_rejected(self, tmp_path):
        """Test that colliding names fail the scan under the reject policy."""
        scanner = DirectoryScanner(collision_policy=KeyCollisionPolicy.REJECT)
        paths = [tmp_path / "FOO.TXT", tmp_path / "foo.txt"]
        scanner.list_matching_files = Mock(return_value=paths)
        prober = Mock(spec=IFileProber)
        prober.probe.side_effect = record_for
        scanner.prober = prober

        with pytest.raises(KeyCollisionError) as exc_info:
            scanner.scan(tmp_path, "*.txt")

        assert exc_info.value.context["key"] == "FOO.TXT"
