"""
Shared fixtures for scanning engine tests.
Creates isolated temporary directories with controlled test files.
"""
import pytest
import tempfile
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Set

from dupwalk.core.models import DuplicateGroup, ResultIndex


@pytest.fixture
def temp_dir():
    """Creates isolated temporary directory, auto-cleanup after test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_files(temp_dir) -> Dict[str, Path]:
    """
    Creates controlled test files for duplicate scenarios:
    - 2 identical files (duplicates) + 1 more copy in a subdirectory
    - 2 identical files of another content
    - 3 unique files (different content)
    - 1 empty file (never hashed)
    """
    files = {}

    # Duplicate group #1 (1KB of 'A')
    content_a = b"A" * 1024
    files["dup1_a"] = temp_dir / "dup1_a.txt"
    files["dup1_b"] = temp_dir / "dup1_b.txt"
    files["dup1_a"].write_bytes(content_a)
    files["dup1_b"].write_bytes(content_a)

    # Duplicate group #2 (2KB of 'B')
    content_b = b"B" * 2048
    files["dup2_a"] = temp_dir / "dup2_a.txt"
    files["dup2_b"] = temp_dir / "dup2_b.txt"
    files["dup2_a"].write_bytes(content_b)
    files["dup2_b"].write_bytes(content_b)

    # Unique files
    files["unique1"] = temp_dir / "unique1.txt"
    files["unique1"].write_bytes(b"C" * 1500)
    files["unique2"] = temp_dir / "unique2.txt"
    files["unique2"].write_bytes(b"D" * 2500)
    files["unique3"] = temp_dir / "other.tmp"
    files["unique3"].write_bytes(b"E" * 1024)  # Same size as group #1, different content

    # Empty file (0 bytes, never reported)
    files["empty"] = temp_dir / "empty.txt"
    files["empty"].write_bytes(b"")

    # Subdirectory with a third copy of group #1
    subdir = temp_dir / "subdir"
    subdir.mkdir()
    files["sub_dup"] = subdir / "dup_in_subdir.txt"
    files["sub_dup"].write_bytes(content_a)

    return files


def path_sets(groups: Iterable[DuplicateGroup]) -> Set[FrozenSet[str]]:
    """Groups as a set of path sets: order inside and across groups is irrelevant."""
    return {frozenset(group.paths) for group in groups}


def index_path_sets(index: ResultIndex) -> Set[FrozenSet[str]]:
    return path_sets(index.duplicate_groups())


@pytest.fixture
def as_path_sets():
    """Converts a ResultIndex or a list of DuplicateGroups to a set of path sets."""
    def convert(result) -> Set[FrozenSet[str]]:
        if isinstance(result, ResultIndex):
            return index_path_sets(result)
        return path_sets(result)
    return convert


@pytest.fixture
def expected_groups(test_files) -> Set[FrozenSet[str]]:
    """Duplicate groups the test_files tree must produce."""
    return {
        frozenset(str(test_files[k]) for k in ("dup1_a", "dup1_b", "sub_dup")),
        frozenset(str(test_files[k]) for k in ("dup2_a", "dup2_b")),
    }
