"""
dupwalk — concurrent duplicate file finder.

Core features:
- Full-content fingerprints (xxHash64 by default, xxHash128 or MD5 on request)
- Three scan strategies: FANOUT (task per directory and file), POOL (fixed hashing workers), SEQUENTIAL
- Bounded I/O concurrency regardless of how wide the tree fans out
- Fail-fast or collect-and-continue error policy
- CLI interface for headless/server usage
"""

from importlib.metadata import PackageNotFoundError, version as _version

try:
    __version__ = _version("dupwalk")
except PackageNotFoundError:
    __version__ = "0.0.0"

# Public API — only what users should import directly
from dupwalk.commands import FindDuplicatesCommand
from dupwalk.core import (
    ScanParams, ScanStrategy, ErrorPolicy, HashAlgorithmName, DuplicateGroup, ResultIndex, ScanStats,
    UsageError, ScanError, TraversalError, HashError)

__all__ = [
    "FindDuplicatesCommand",
    "ScanParams",
    "ScanStrategy",
    "ErrorPolicy",
    "HashAlgorithmName",
    "DuplicateGroup",
    "ResultIndex",
    "ScanStats",
    "UsageError",
    "ScanError",
    "TraversalError",
    "HashError",
    "__version__",
]
