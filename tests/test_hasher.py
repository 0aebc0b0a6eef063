"""
Unit tests for HasherImpl with the available hash algorithms.
Verifies full-content fingerprints and fail-fast behaviour on unreadable files.
"""
import hashlib

import pytest

from dupwalk.core import hasher as hasher_module
from dupwalk.core.errors import HashError
from dupwalk.core.hasher import (
    HasherImpl, Md5AlgorithmImpl, XXHash128AlgorithmImpl, XXHashAlgorithmImpl, get_algorithm)
from dupwalk.core.models import HashAlgorithmName, PendingPair


class TestHasherImpl:
    """Test streaming full-content hashing."""

    def test_same_content_produces_same_fingerprint(self, tmp_path):
        content = b"test content " * 1000
        (tmp_path / "a").write_bytes(content)
        (tmp_path / "b").write_bytes(content)

        hasher = HasherImpl(XXHashAlgorithmImpl())
        pair1 = hasher.fingerprint(str(tmp_path / "a"))
        pair2 = hasher.fingerprint(str(tmp_path / "b"))

        assert isinstance(pair1, PendingPair)
        assert pair1.fingerprint == pair2.fingerprint
        assert pair1.path == str(tmp_path / "a")
        assert len(pair1.fingerprint) == 8  # xxHash64 = 8 bytes

    def test_pair_carries_bytes_read(self, tmp_path):
        (tmp_path / "big").write_bytes(b"x" * 100_000)
        (tmp_path / "empty").write_bytes(b"")

        hasher = HasherImpl(chunk_size=4096)
        assert hasher.fingerprint(str(tmp_path / "big")).size == 100_000
        assert hasher.fingerprint(str(tmp_path / "empty")).size == 0

    def test_different_content_produces_different_fingerprints(self, tmp_path):
        (tmp_path / "a").write_bytes(b"A" * 1024)
        (tmp_path / "b").write_bytes(b"B" * 1024)

        hasher = HasherImpl()
        assert hasher.fingerprint(str(tmp_path / "a")).fingerprint != \
            hasher.fingerprint(str(tmp_path / "b")).fingerprint

    def test_whole_file_is_hashed_not_a_sample(self, tmp_path):
        """Files differing only in the last byte of a large body must not collide."""
        body = b"X" * (3 * 64 * 1024)
        (tmp_path / "a").write_bytes(body + b"1")
        (tmp_path / "b").write_bytes(body + b"2")

        hasher = HasherImpl()
        assert hasher.fingerprint(str(tmp_path / "a")).fingerprint != \
            hasher.fingerprint(str(tmp_path / "b")).fingerprint

    def test_chunk_size_does_not_change_fingerprint(self, tmp_path):
        path = tmp_path / "data.bin"
        path.write_bytes(bytes(range(256)) * 40)

        small = HasherImpl(XXHashAlgorithmImpl(), chunk_size=7).fingerprint(str(path))
        large = HasherImpl(XXHashAlgorithmImpl(), chunk_size=1 << 20).fingerprint(str(path))
        assert small == large

    def test_md5_matches_hashlib(self, tmp_path):
        content = b"hello"
        path = tmp_path / "hello.txt"
        path.write_bytes(content)

        pair = HasherImpl(Md5AlgorithmImpl()).fingerprint(str(path))
        assert pair.fingerprint == hashlib.md5(content).digest()

    @pytest.mark.parametrize("name,length", [
        (HashAlgorithmName.XXH64, 8),
        (HashAlgorithmName.XXH128, 16),
        (HashAlgorithmName.MD5, 16),
    ])
    def test_fingerprint_length_per_algorithm(self, tmp_path, name, length):
        path = tmp_path / "f"
        path.write_bytes(b"content")
        algorithm = get_algorithm(name)
        assert algorithm.name == name.value
        assert len(HasherImpl(algorithm).fingerprint(str(path)).fingerprint) == length

    def test_get_algorithm_rejects_unknown(self):
        with pytest.raises(ValueError):
            get_algorithm("sha1")

    def test_default_algorithm_is_xxh64(self):
        assert isinstance(HasherImpl().algorithm, XXHashAlgorithmImpl)
        assert not isinstance(HasherImpl().algorithm, XXHash128AlgorithmImpl)

    def test_missing_file_raises_hash_error(self, tmp_path):
        """Unlike a vanished directory entry, a file that cannot be opened is a hash failure."""
        missing = tmp_path / "deleted.txt"

        with pytest.raises(HashError) as exc_info:
            HasherImpl().fingerprint(str(missing))

        assert exc_info.value.path == str(missing)
        assert isinstance(exc_info.value.__cause__, FileNotFoundError)

    def test_permission_denied_raises_hash_error(self, tmp_path, monkeypatch):
        target = tmp_path / "locked.bin"
        target.write_bytes(b"secret")

        def fake_open(path, mode="r", *args, **kwargs):
            raise PermissionError(f"Permission denied: {path}")

        monkeypatch.setattr(hasher_module, "open", fake_open, raising=False)

        with pytest.raises(HashError):
            HasherImpl().fingerprint(str(target))

    def test_read_failure_mid_file_raises_hash_error(self, tmp_path, monkeypatch):
        target = tmp_path / "flaky.bin"
        target.write_bytes(b"X" * 1024)

        class FlakyFile:
            def __init__(self):
                self.reads = 0

            def __enter__(self):
                return self

            def __exit__(self, *exc):
                return False

            def read(self, size):
                self.reads += 1
                if self.reads > 1:
                    raise OSError("Input/output error")
                return b"X" * size

        monkeypatch.setattr(hasher_module, "open", lambda *a, **kw: FlakyFile(), raising=False)

        with pytest.raises(HashError, match="Input/output error"):
            HasherImpl(chunk_size=16).fingerprint(str(target))
