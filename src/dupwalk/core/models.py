"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/models.py
Data models for tree scanning and duplicate grouping.
"""

import os
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional

from dupwalk.core.errors import UsageError


# =============================
# Enums
# =============================

class EntryKind(Enum):
    REGULAR = "regular"
    DIRECTORY = "directory"
    OTHER = "other"


class ScanStrategy(Enum):
    """
    How the tree is traversed and how hashing work is scheduled.
    """
    FANOUT = "fanout"
    POOL = "pool"
    SEQUENTIAL = "sequential"

    @property
    def display_name(self) -> str:
        """Human-readable name for UI display."""
        mapping = {
            ScanStrategy.FANOUT: "Fan-out",
            ScanStrategy.POOL: "Worker pool",
            ScanStrategy.SEQUENTIAL: "Sequential",
        }
        return mapping.get(self, self.value)

    @property
    def description(self) -> str:
        """Detailed description for help text."""
        mapping = {
            ScanStrategy.FANOUT:
                "One task per subdirectory and per file, bounded by the limiter",
            ScanStrategy.POOL:
                "One walking thread feeding a fixed set of hashing workers",
            ScanStrategy.SEQUENTIAL:
                "Single thread, walk and hash in-line (slowest)",
        }
        return mapping.get(self, self.value)

    def __repr__(self) -> str:
        return self.value


class ErrorPolicy(Enum):
    """
    What a traversal or hashing failure does to the run.
    FAIL_FAST aborts the whole run and discards all results.
    COLLECT isolates the failure, records it and keeps scanning.
    """
    FAIL_FAST = "fail-fast"
    COLLECT = "collect"

    def __repr__(self) -> str:
        return self.value


class HashAlgorithmName(Enum):
    XXH64 = "xxh64"
    XXH128 = "xxh128"
    MD5 = "md5"


# ======================
#  Core Data Models
# ======================

@dataclass(frozen=True)
class FileEntry:
    """
    One directory entry as seen at inspection time.
    Symlinks are never followed, so a link to a file is OTHER.
    """
    path: str
    size: int
    kind: EntryKind

    @property
    def is_hashable(self) -> bool:
        return self.kind is EntryKind.REGULAR and self.size > 0

    def __repr__(self):
        return f"<FileEntry path={self.path}, size={self.size}, kind={self.kind.value}>"


@dataclass(frozen=True)
class PendingPair:
    """A fingerprint and the path it was computed from, on its way to the collector."""
    fingerprint: bytes
    path: str
    size: int = 0  # bytes actually streamed through the hash


@dataclass
class DuplicateGroup:
    """
    Two or more paths whose content produced the same fingerprint.
    """
    fingerprint: bytes
    paths: List[str]

    @property
    def short_id(self) -> str:
        """Last 7 hex digits of the fingerprint, enough to tell groups apart on screen."""
        return self.fingerprint.hex()[-7:]

    @property
    def duplicate_count(self) -> int:
        return len(self.paths)

    def is_duplicate(self) -> bool:
        """True if this group contains at least two paths."""
        return self.duplicate_count >= 2

    def __repr__(self):
        return f"<DuplicateGroup id={self.short_id}, count={len(self.paths)}>"


class ResultIndex:
    """
    Fingerprint -> paths index built by the collector.

    Paths are kept in arrival order per fingerprint. Once frozen the index is
    read-only and is safe to hand to any number of readers.
    """

    def __init__(self):
        self._entries: Dict[bytes, List[str]] = {}
        self._frozen = False

    def add(self, pair: PendingPair) -> None:
        if self._frozen:
            raise RuntimeError("ResultIndex is frozen")
        self._entries.setdefault(pair.fingerprint, []).append(pair.path)

    def freeze(self) -> "ResultIndex":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def paths_for(self, fingerprint: bytes) -> List[str]:
        return list(self._entries.get(fingerprint, []))

    def fingerprints(self) -> List[bytes]:
        return list(self._entries)

    def duplicate_groups(self) -> Iterator[DuplicateGroup]:
        """Yields a group for every fingerprint shared by two or more paths."""
        for fingerprint, paths in self._entries.items():
            if len(paths) >= 2:
                yield DuplicateGroup(fingerprint=fingerprint, paths=list(paths))

    @property
    def file_count(self) -> int:
        return sum(len(paths) for paths in self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, fingerprint) -> bool:
        return fingerprint in self._entries

    def __repr__(self):
        return f"<ResultIndex fingerprints={len(self)}, files={self.file_count}, frozen={self._frozen}>"


@dataclass(frozen=True)
class ScanFailure:
    """An isolated failure recorded when the error policy is COLLECT."""
    path: str
    kind: str
    message: str


class ScanStats:
    """
    Counters collected during a scan. Updated concurrently by walker and hasher tasks.
    """

    COUNTERS = ("directories", "files_hashed", "bytes_hashed", "ignored", "vanished")

    def __init__(self):
        self.total_time: float = 0.0
        self.peak_concurrency: int = 0
        self.failures: List[ScanFailure] = []
        self.directories: int = 0
        self.files_hashed: int = 0
        self.bytes_hashed: int = 0
        self.ignored: int = 0
        self.vanished: int = 0
        self._lock = threading.Lock()

    def increment(self, counter: str, amount: int = 1) -> None:
        if counter not in self.COUNTERS:
            raise AttributeError(f"Unknown counter: {counter}")
        with self._lock:
            setattr(self, counter, getattr(self, counter) + amount)

    def add_failure(self, failure: ScanFailure) -> None:
        with self._lock:
            self.failures.append(failure)

    def print_summary(self) -> str:
        lines = [
            "📊 Scan Statistics:",
            f"Total Execution Time: {self.total_time:.3f}s\n",
            f"📁 Directories walked: {self.directories}",
            f"📄 Files hashed: {self.files_hashed} ({self.bytes_hashed} bytes)",
            f"🚫 Entries ignored: {self.ignored}",
            f"👻 Entries vanished during scan: {self.vanished}",
            f"⚙️  Peak concurrent operations: {self.peak_concurrency}",
        ]
        if self.failures:
            lines.append(f"❌ Failures: {len(self.failures)}")
        return "\n".join(lines)


def default_capacity() -> int:
    """Limiter capacity when none is given: twice the available hardware parallelism."""
    return 2 * (os.cpu_count() or 1)


# ======================
#  Parameters
# ======================

@dataclass
class ScanParams:
    """Parameters for a scan run with validation. Interface-agnostic."""
    root_dir: str
    max_concurrency: int = field(default_factory=default_capacity)
    workers: Optional[int] = None
    strategy: ScanStrategy = ScanStrategy.FANOUT
    algorithm: HashAlgorithmName = HashAlgorithmName.XXH64
    error_policy: ErrorPolicy = ErrorPolicy.FAIL_FAST

    def __post_init__(self):
        """Validate parameters immediately after creation."""
        if not self.root_dir:
            raise UsageError("Root directory cannot be empty")

        if self.max_concurrency < 1:
            raise UsageError("Concurrency limit must be at least 1")

        if self.workers is None:
            self.workers = 2 * self.max_concurrency
        elif self.workers < 1:
            raise UsageError("Worker count must be at least 1")

        for name, enum_type in (
                ("strategy", ScanStrategy),
                ("algorithm", HashAlgorithmName),
                ("error_policy", ErrorPolicy),
        ):
            if not isinstance(getattr(self, name), enum_type):
                raise UsageError(f"{name} must be a {enum_type.__name__}")
