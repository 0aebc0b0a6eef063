"""
Core scanning engine — limiter, hasher, walker, coordinator, collector and run strategies.

- ConcurrencyLimiter: bounded semaphore capping simultaneous directory reads and file hashes
- HasherImpl + XXHashAlgorithmImpl: full-content fingerprints (xxHash64 by default, MD5 available)
- TreeWalker: per-directory fan-out into walker and hasher tasks
- Coordinator: outstanding-task count, termination detection and error policy
- Collector: single-writer aggregation into a ResultIndex
- FanOutScanner / WorkerPoolScanner / SequentialScanner: run strategies

All components are pure Python with no UI dependencies.
"""

from .errors import UsageError, ScanError, TraversalError, HashError
from .models import (
    EntryKind, ErrorPolicy, HashAlgorithmName, ScanStrategy, FileEntry, PendingPair,
    ResultIndex, DuplicateGroup, ScanFailure, ScanStats, ScanParams)
from .limiter import ConcurrencyLimiter
from .hasher import HasherImpl, XXHashAlgorithmImpl, XXHash128AlgorithmImpl, Md5AlgorithmImpl, get_algorithm
from .coordinator import Coordinator
from .collector import Collector
from .walker import TreeWalker
from .scanner import FanOutScanner, WorkerPoolScanner, SequentialScanner, create_scanner

__all__ = [
    "UsageError",
    "ScanError",
    "TraversalError",
    "HashError",
    "EntryKind",
    "ErrorPolicy",
    "HashAlgorithmName",
    "ScanStrategy",
    "FileEntry",
    "PendingPair",
    "ResultIndex",
    "DuplicateGroup",
    "ScanFailure",
    "ScanStats",
    "ScanParams",
    "ConcurrencyLimiter",
    "HasherImpl",
    "XXHashAlgorithmImpl",
    "XXHash128AlgorithmImpl",
    "Md5AlgorithmImpl",
    "get_algorithm",
    "Coordinator",
    "Collector",
    "TreeWalker",
    "FanOutScanner",
    "WorkerPoolScanner",
    "SequentialScanner",
    "create_scanner",
]
