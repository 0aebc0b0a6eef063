"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

hasher.py
Computes content fingerprints by streaming whole files through a pluggable hash algorithm.

This implementation ensures predictable behavior:
- The entire file is hashed, never a sample or a partial chunk
- Any open or read failure is raised as HashError, never replaced by a placeholder digest
"""

import hashlib
from typing import Dict, Optional

import xxhash

from dupwalk.core.errors import HashError
from dupwalk.core.interfaces import HashAlgorithm, Hasher, HashState
from dupwalk.core.models import HashAlgorithmName, PendingPair

READ_CHUNK_SIZE = 64 * 1024


# Use the same way to implement and use any other hashing algorithm
class XXHashAlgorithmImpl(HashAlgorithm):
    name = "xxh64"

    def new(self) -> HashState:
        return xxhash.xxh64()


class XXHash128AlgorithmImpl(HashAlgorithm):
    name = "xxh128"

    def new(self) -> HashState:
        return xxhash.xxh3_128()


class Md5AlgorithmImpl(HashAlgorithm):
    name = "md5"

    def new(self) -> HashState:
        return hashlib.md5()


ALGORITHMS: Dict[HashAlgorithmName, type] = {
    HashAlgorithmName.XXH64: XXHashAlgorithmImpl,
    HashAlgorithmName.XXH128: XXHash128AlgorithmImpl,
    HashAlgorithmName.MD5: Md5AlgorithmImpl,
}


def get_algorithm(name: HashAlgorithmName) -> HashAlgorithm:
    try:
        return ALGORITHMS[name]()
    except KeyError:
        raise ValueError(f"Unknown hash algorithm: {name!r}") from None


class HasherImpl(Hasher):
    """
    A hasher implementation that supports any algorithm via the HashAlgorithm interface.
    Reads in fixed-size chunks so memory use does not grow with file size.
    """

    def __init__(self, algorithm: Optional[HashAlgorithm] = None, chunk_size: int = READ_CHUNK_SIZE):
        self.algorithm = algorithm or XXHashAlgorithmImpl()
        self.chunk_size = chunk_size

    def fingerprint(self, path: str) -> PendingPair:
        """
        Hashes the full content of `path`.
        The returned pair carries the number of bytes read, which can differ
        from the size seen at inspection if the file changed in between.

        Raises:
            HashError: if the file cannot be opened or a read fails mid-way.
        """
        state = self.algorithm.new()
        total = 0
        try:
            with open(path, "rb") as f:
                while True:
                    chunk = f.read(self.chunk_size)
                    if not chunk:
                        break
                    state.update(chunk)
                    total += len(chunk)
        except OSError as e:
            raise HashError(path, f"Failed to hash {path}: {e}") from e

        return PendingPair(fingerprint=state.digest(), path=path, size=total)
