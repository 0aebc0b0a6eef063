"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/scanner.py
Run strategies that wire the walker, hasher, limiter, coordinator and collector together.

FanOutScanner     : one task per subdirectory and per file on a thread pool (default)
WorkerPoolScanner : one walking thread feeding a fixed set of hashing workers
SequentialScanner : walk and hash in-line on the calling thread

All strategies share directory enumeration, hashing and the error policy, and
return the same frozen ResultIndex for the same tree.
"""

import logging
import os
import queue
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Dict, Iterator, Optional

from dupwalk.core.collector import Collector
from dupwalk.core.coordinator import Coordinator
from dupwalk.core.errors import TraversalError
from dupwalk.core.hasher import HasherImpl, get_algorithm
from dupwalk.core.interfaces import FileScanner, HashAlgorithm
from dupwalk.core.limiter import ConcurrencyLimiter
from dupwalk.core.models import (
    EntryKind, ErrorPolicy, FileEntry, ResultIndex, ScanParams, ScanStats, ScanStrategy,
    default_capacity)
from dupwalk.core.walker import TreeWalker, hash_entry, read_directory

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int, object], None]


class ScannerBase(FileScanner):
    """
    Shared setup for every strategy: root validation, limiter, hasher, stats and timing.

    Attributes:
        root_dir: Root directory to scan
        max_concurrency: Limiter capacity K (simultaneous directory reads + file hashes)
        workers: Threads available to run tasks; independent of K
        algorithm: Hash algorithm used for fingerprints
        error_policy: FAIL_FAST aborts on the first failure, COLLECT records and continues
    """

    def __init__(
        self,
        root_dir: str,
        max_concurrency: Optional[int] = None,
        workers: Optional[int] = None,
        algorithm: Optional[HashAlgorithm] = None,
        error_policy: ErrorPolicy = ErrorPolicy.FAIL_FAST
    ):
        self.root_dir = root_dir
        self.max_concurrency = max_concurrency or default_capacity()
        self.workers = workers or 2 * self.max_concurrency
        self.hasher = HasherImpl(algorithm)
        self.error_policy = error_policy
        self.stats = ScanStats()
        self.limiter: Optional[ConcurrencyLimiter] = None
        self.coordinator: Optional[Coordinator] = None

    def scan(self, progress_callback: Optional[ProgressCallback] = None) -> ResultIndex:
        """
        Walks the tree and returns the frozen index of every fingerprinted file.
        Under FAIL_FAST the first TraversalError/HashError propagates and no index is returned.
        """
        logger.debug(f"Starting {type(self).__name__} on {self.root_dir}")
        logger.debug(f"Limits: max_concurrency={self.max_concurrency}, workers={self.workers}")

        self.stats = ScanStats()
        self._validate_root()

        self.limiter = ConcurrencyLimiter(self.max_concurrency)
        self.coordinator = Coordinator(self.error_policy, self.stats)
        collector = Collector(maxsize=4 * self.max_concurrency, progress_callback=progress_callback)
        self.coordinator.add_listener(collector.finish)

        start_time = time.time()
        collector.start()
        try:
            self._run(collector)
            self.coordinator.wait()
            index = collector.result()
        finally:
            self.stats.total_time = time.time() - start_time
            self.stats.peak_concurrency = self.limiter.peak

        self.coordinator.raise_if_failed()
        logger.debug(f"Scan completed in {self.stats.total_time:.2f}s: {index!r}")
        return index

    def _run(self, collector: Collector) -> None:
        """Runs the root task. Must call coordinator.done() for it exactly once."""
        raise NotImplementedError

    def _validate_root(self) -> None:
        root_path = Path(self.root_dir)
        if not root_path.exists():
            error_msg = f"Directory does not exist: {self.root_dir}"
            logger.error(error_msg)
            raise TraversalError(self.root_dir, error_msg)
        if not root_path.is_dir():
            error_msg = f"Not a directory: {self.root_dir}"
            logger.error(error_msg)
            raise TraversalError(self.root_dir, error_msg)

    def _hash(self, entry: FileEntry, collector: Collector) -> None:
        hash_entry(entry, self.hasher, self.limiter, collector, self.stats)

    def _iter_files(self) -> Iterator[FileEntry]:
        """
        Depth-first walk on the calling thread yielding every hashable file.
        Directory failures go through the coordinator; under FAIL_FAST the walk stops.
        """
        pending = [self.root_dir]
        while pending and not self.coordinator.aborted:
            directory = pending.pop()
            try:
                with self.limiter.slot():
                    entries = read_directory(directory, self.stats)
            except TraversalError as e:
                self.coordinator.fail(e)
                continue
            if entries is None:
                continue

            for entry in entries:
                if entry.kind is EntryKind.DIRECTORY:
                    pending.append(entry.path)
                elif entry.is_hashable:
                    yield entry
                else:
                    logger.debug(f"Ignoring {entry}")
                    self.stats.increment("ignored")


class FanOutScanner(ScannerBase):
    """
    One walker task per directory and one hasher task per file, submitted to a
    thread pool as they are discovered. Termination is detected by the coordinator.
    """

    def _run(self, collector: Collector) -> None:
        with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="dupwalk") as executor:
            walker = TreeWalker(self.coordinator, self.limiter, self.hasher, collector, executor)
            try:
                executor.submit(self.coordinator.run_task, walker.walk, self.root_dir)
            except BaseException:
                self.coordinator.done()
                raise
            self.coordinator.wait()


class WorkerPoolScanner(ScannerBase):
    """
    A fixed set of hashing workers reading paths from a bounded queue, fed by
    one walk on the calling thread. The walk counts as the root task.
    """

    _STOP = None

    def _run(self, collector: Collector) -> None:
        paths: "queue.Queue" = queue.Queue(maxsize=2 * self.workers)
        threads = [
            threading.Thread(
                target=self._work, args=(paths, collector), name=f"dupwalk-worker-{i}", daemon=True)
            for i in range(self.workers)
        ]
        for thread in threads:
            thread.start()

        try:
            for entry in self._iter_files():
                self.coordinator.register()
                paths.put(entry)
        except Exception as e:
            self.coordinator.fail(e)
        finally:
            # Workers exit once they reach their sentinel, after the queued paths
            for _ in threads:
                paths.put(self._STOP)
            for thread in threads:
                thread.join()
            self.coordinator.done()

    def _work(self, paths: "queue.Queue", collector: Collector) -> None:
        while True:
            entry = paths.get()
            if entry is self._STOP:
                return
            self.coordinator.run_task(self._hash, entry, collector)


class SequentialScanner(ScannerBase):
    """Walks and hashes on the calling thread. The limiter never sees more than one holder."""

    def _run(self, collector: Collector) -> None:
        try:
            for entry in self._iter_files():
                self.coordinator.register()
                self.coordinator.run_task(self._hash, entry, collector)
        except Exception as e:
            self.coordinator.fail(e)
        finally:
            self.coordinator.done()


SCANNERS: Dict[ScanStrategy, type] = {
    ScanStrategy.FANOUT: FanOutScanner,
    ScanStrategy.POOL: WorkerPoolScanner,
    ScanStrategy.SEQUENTIAL: SequentialScanner,
}


def create_scanner(params: ScanParams) -> ScannerBase:
    """Builds the scanner for the configured strategy."""
    scanner_cls = SCANNERS[params.strategy]
    return scanner_cls(
        root_dir=os.fspath(params.root_dir),
        max_concurrency=params.max_concurrency,
        workers=params.workers,
        algorithm=get_algorithm(params.algorithm),
        error_policy=params.error_policy,
    )
