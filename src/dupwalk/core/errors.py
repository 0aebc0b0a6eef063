"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/errors.py
Error taxonomy of a scan run.

UsageError      : invalid invocation, raised before any traversal starts
TraversalError  : a directory could not be enumerated
HashError       : a file could not be opened or read while fingerprinting
"""

from typing import Optional


class UsageError(ValueError):
    """Invalid or missing scan parameters."""


class ScanError(RuntimeError):
    """
    Base class for failures that happen while the tree is being scanned.
    Carries the offending path so callers can report it without parsing messages.
    """

    kind = "scan"

    def __init__(self, path: str, message: Optional[str] = None):
        self.path = path
        super().__init__(message or f"{self.kind} failed: {path}")


class TraversalError(ScanError):
    """Directory unreadable or enumeration failed for a reason other than a vanished entry."""

    kind = "traversal"


class HashError(ScanError):
    """File unreadable, or a read failed part-way through fingerprinting."""

    kind = "hash"
