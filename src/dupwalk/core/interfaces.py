"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

interfaces.py

Defines core interfaces (Protocols) used throughout the scanning engine.

Key Components:
---------------
- HashState / HashAlgorithm: streaming digest objects and their factories (xxHash, MD5, ...).
- Hasher: Interface for fingerprinting one file end-to-end.
- FileScanner: Interface for a run strategy that walks a tree and returns the result index.
"""

from typing import Protocol, Optional, Callable

from dupwalk.core.models import PendingPair, ResultIndex, ScanStats


class HashState(Protocol):
    """Incremental digest, the shape shared by hashlib and xxhash objects."""
    def update(self, data: bytes) -> None: ...
    def digest(self) -> bytes: ...


class HashAlgorithm(Protocol):
    """
    Interface for generic hash algorithms.

    Allows plugging in different hashing functions like MD5 or xxHash
    without affecting traversal or aggregation.
    """

    name: str

    def new(self) -> HashState:
        """Returns a fresh incremental digest."""
        ...


class Hasher(Protocol):
    """Interface for fingerprinting the full content of a file."""
    def fingerprint(self, path: str) -> PendingPair: ...


class FileScanner(Protocol):
    """
    Interface for walking a tree and aggregating fingerprints.

    Methods:
        scan: Walks the configured root and returns the frozen result index.
    """
    stats: ScanStats

    def scan(
        self,
        progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> ResultIndex:
        """
        Scan the configured directory.

        Args:
            progress_callback: Optional callback for reporting progress (stage, current, total).

        Returns:
            Frozen ResultIndex of every fingerprinted file.

        Raises:
            TraversalError / HashError under the fail-fast error policy.
        """
        ...
