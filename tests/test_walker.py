"""
Unit tests for directory enumeration and the fan-out TreeWalker.
Verifies entry classification, vanished-entry tolerance and task spawning.
"""
import os
from concurrent.futures import ThreadPoolExecutor

import pytest

from dupwalk.core.collector import Collector
from dupwalk.core.coordinator import Coordinator
from dupwalk.core.errors import TraversalError
from dupwalk.core.hasher import HasherImpl
from dupwalk.core.limiter import ConcurrencyLimiter
from dupwalk.core.models import EntryKind, ScanStats
from dupwalk.core.walker import TreeWalker, inspect_entry, read_directory


def _make_symlink(link, target) -> bool:
    try:
        link.symlink_to(target)
        return True
    except (OSError, NotImplementedError):
        # Symlinks not supported (e.g., Windows without admin rights)
        return False


class TestInspectEntry:

    def test_classifies_regular_file_and_directory(self, tmp_path):
        (tmp_path / "f.txt").write_bytes(b"abc")
        (tmp_path / "d").mkdir()

        f = inspect_entry(str(tmp_path / "f.txt"))
        d = inspect_entry(str(tmp_path / "d"))

        assert f.kind is EntryKind.REGULAR and f.size == 3
        assert d.kind is EntryKind.DIRECTORY

    def test_symlink_is_not_followed(self, tmp_path):
        real = tmp_path / "real.txt"
        real.write_bytes(b"content")
        link = tmp_path / "link.txt"
        if not _make_symlink(link, real):
            pytest.skip("symlinks not supported")

        assert inspect_entry(str(link)).kind is EntryKind.OTHER

    def test_vanished_entry_returns_none(self, tmp_path):
        assert inspect_entry(str(tmp_path / "gone")) is None


class TestReadDirectory:

    def test_lists_every_entry(self, test_files, temp_dir):
        stats = ScanStats()
        entries = read_directory(str(temp_dir), stats)

        names = {os.path.basename(e.path) for e in entries}
        assert "subdir" in names
        assert "empty.txt" in names
        assert str(temp_dir) not in {e.path for e in entries}
        assert stats.directories == 1

    def test_vanished_directory_returns_none(self, tmp_path):
        stats = ScanStats()
        assert read_directory(str(tmp_path / "gone"), stats) is None
        assert stats.vanished == 1
        assert stats.directories == 0

    def test_entry_vanishing_between_listing_and_inspection_is_skipped(self, tmp_path, monkeypatch):
        (tmp_path / "stays.txt").write_bytes(b"1")
        racer = tmp_path / "racer.txt"
        racer.write_bytes(b"2")

        original_lstat = os.lstat

        def racy_lstat(path, *args, **kwargs):
            if os.fspath(path) == str(racer):
                raise FileNotFoundError(2, "No such file or directory", str(path))
            return original_lstat(path, *args, **kwargs)

        monkeypatch.setattr(os, "lstat", racy_lstat)

        stats = ScanStats()
        entries = read_directory(str(tmp_path), stats)

        assert [os.path.basename(e.path) for e in entries] == ["stays.txt"]
        assert stats.vanished == 1

    def test_permission_denied_is_traversal_error(self, tmp_path, monkeypatch):
        locked = tmp_path / "locked"
        locked.mkdir()
        original_scandir = os.scandir

        def guarded_scandir(path="."):
            if os.fspath(path) == str(locked):
                raise PermissionError(13, "Permission denied", str(path))
            return original_scandir(path)

        monkeypatch.setattr(os, "scandir", guarded_scandir)

        with pytest.raises(TraversalError) as exc_info:
            read_directory(str(locked), ScanStats())

        assert exc_info.value.path == str(locked)
        assert isinstance(exc_info.value.__cause__, PermissionError)

    def test_inspection_failure_other_than_vanishing_is_traversal_error(self, tmp_path, monkeypatch):
        (tmp_path / "f.txt").write_bytes(b"1")

        def broken_lstat(path, *args, **kwargs):
            raise OSError(5, "Input/output error", str(path))

        monkeypatch.setattr(os, "lstat", broken_lstat)

        with pytest.raises(TraversalError):
            read_directory(str(tmp_path), ScanStats())


class TestTreeWalker:
    """Fan-out walk driven directly, without a scanner."""

    @staticmethod
    def _run(root, capacity=2, workers=4):
        stats = ScanStats()
        coordinator = Coordinator(stats=stats)
        limiter = ConcurrencyLimiter(capacity)
        collector = Collector(maxsize=4).start()
        coordinator.add_listener(collector.finish)

        with ThreadPoolExecutor(max_workers=workers) as executor:
            walker = TreeWalker(coordinator, limiter, HasherImpl(), collector, executor)
            executor.submit(coordinator.run_task, walker.walk, str(root))
            assert coordinator.wait(timeout=30)

        index = collector.result(timeout=5)
        return index, stats, coordinator, limiter

    def test_walks_subdirectories_through_spawned_tasks(self, test_files, temp_dir, as_path_sets, expected_groups):
        index, stats, coordinator, limiter = self._run(temp_dir)

        assert as_path_sets(index) == expected_groups
        assert stats.directories == 2
        assert stats.files_hashed == 8
        assert coordinator.outstanding == 0
        assert coordinator.error is None
        assert limiter.peak <= 2
        assert limiter.active == 0

    def test_empty_files_and_symlinks_are_ignored(self, tmp_path):
        (tmp_path / "empty1").write_bytes(b"")
        (tmp_path / "empty2").write_bytes(b"")
        (tmp_path / "real.txt").write_bytes(b"content")
        linked = _make_symlink(tmp_path / "link.txt", tmp_path / "real.txt")

        index, stats, _, _ = self._run(tmp_path)

        assert index.file_count == 1
        assert list(index.duplicate_groups()) == []
        assert stats.ignored == (3 if linked else 2)

    def test_deep_chain_of_directories(self, tmp_path):
        current = tmp_path
        for depth in range(30):
            current = current / f"level{depth}"
            current.mkdir()
            (current / "same.bin").write_bytes(b"payload")

        index, stats, coordinator, _ = self._run(tmp_path, capacity=1, workers=2)

        groups = list(index.duplicate_groups())
        assert len(groups) == 1
        assert groups[0].duplicate_count == 30
        assert stats.directories == 31
        assert coordinator.outstanding == 0
