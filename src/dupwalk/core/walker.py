"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/walker.py
Directory enumeration and the fan-out tree walker.

Each TreeWalker task lists exactly one directory. Subdirectories are never
descended in-line: every one of them becomes a new walker task, and every
non-empty regular file becomes a hasher task. Both are registered with the
coordinator before they are submitted.
"""

import logging
import os
import stat
from concurrent.futures import Executor
from typing import List, Optional

from dupwalk.core.collector import Collector
from dupwalk.core.coordinator import Coordinator
from dupwalk.core.errors import TraversalError
from dupwalk.core.interfaces import Hasher
from dupwalk.core.limiter import ConcurrencyLimiter
from dupwalk.core.models import EntryKind, FileEntry, ScanStats

logger = logging.getLogger(__name__)

# An entry listed by its parent but gone by the time we look at it
VANISHED_ERRORS = (FileNotFoundError, NotADirectoryError)


def inspect_entry(path: str) -> Optional[FileEntry]:
    """
    Stats `path` without following symlinks.
    Returns None if the entry vanished since it was listed.
    """
    try:
        st = os.lstat(path)
    except VANISHED_ERRORS:
        logger.debug(f"Entry vanished before inspection: {path}")
        return None
    except OSError as e:
        raise TraversalError(path, f"Cannot inspect {path}: {e}") from e

    if stat.S_ISDIR(st.st_mode):
        kind = EntryKind.DIRECTORY
    elif stat.S_ISREG(st.st_mode):
        kind = EntryKind.REGULAR
    else:
        kind = EntryKind.OTHER
    return FileEntry(path=path, size=st.st_size, kind=kind)


def read_directory(directory: str, stats: ScanStats) -> Optional[List[FileEntry]]:
    """
    Lists and inspects every entry of `directory`.

    Returns:
        The entries, or None if the directory itself vanished before it could be opened.
    Raises:
        TraversalError: on any other enumeration failure (permission denied, I/O error).
    """
    entries = []
    try:
        with os.scandir(directory) as it:
            names = [entry.path for entry in it]
    except VANISHED_ERRORS:
        logger.debug(f"Directory vanished before enumeration: {directory}")
        stats.increment("vanished")
        return None
    except OSError as e:
        raise TraversalError(directory, f"Cannot read directory {directory}: {e}") from e

    for path in names:
        # Never re-enter the directory being walked
        if path == directory:
            continue
        entry = inspect_entry(path)
        if entry is None:
            stats.increment("vanished")
            continue
        entries.append(entry)

    stats.increment("directories")
    return entries


class TreeWalker:
    """
    Spawns one task per subdirectory and one per hashable file.

    Attributes:
        coordinator: Counts outstanding tasks and carries the error policy
        limiter: Caps open directories plus files being hashed
        hasher: Fingerprints one file
        collector: Receives every (fingerprint, path) pair
        executor: Runs the spawned tasks
    """

    def __init__(
        self,
        coordinator: Coordinator,
        limiter: ConcurrencyLimiter,
        hasher: Hasher,
        collector: Collector,
        executor: Executor
    ):
        self.coordinator = coordinator
        self.limiter = limiter
        self.hasher = hasher
        self.collector = collector
        self.executor = executor
        self.stats = coordinator.stats

    def walk(self, directory: str) -> None:
        """Task body: enumerate one directory and spawn its children."""
        with self.limiter.slot():
            entries = read_directory(directory, self.stats)
            if entries is None:
                return

            for entry in entries:
                if self.coordinator.aborted:
                    logger.debug(f"Run aborted, stop walking {directory}")
                    return
                self._dispatch(entry)

    def _dispatch(self, entry: FileEntry) -> None:
        if entry.kind is EntryKind.DIRECTORY:
            self.coordinator.spawn(self.executor, self.walk, entry.path)
        elif entry.is_hashable:
            self.coordinator.spawn(self.executor, self.hash_file, entry)
        else:
            logger.debug(f"Ignoring {entry}")
            self.stats.increment("ignored")

    def hash_file(self, entry: FileEntry) -> None:
        """Task body: fingerprint one file and hand the pair to the collector."""
        hash_entry(entry, self.hasher, self.limiter, self.collector, self.stats)


def hash_entry(
    entry: FileEntry,
    hasher: Hasher,
    limiter: ConcurrencyLimiter,
    collector: Collector,
    stats: ScanStats
) -> None:
    """
    Fingerprints one file while holding a limiter slot and submits the pair.
    A file found empty when read is ignored, even if it had content at inspection.
    """
    with limiter.slot():
        pair = hasher.fingerprint(entry.path)
        if pair.size == 0:
            logger.debug(f"Ignoring {entry.path}: empty when hashed")
            stats.increment("ignored")
            return
        collector.submit(pair)
    stats.increment("files_hashed")
    stats.increment("bytes_hashed", pair.size)
