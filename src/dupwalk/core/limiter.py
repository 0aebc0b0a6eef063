"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/limiter.py
Bounded counting semaphore capping simultaneous I/O operations (open directories
and files being hashed), independent of how wide the tree fans out.
"""

import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from dupwalk.core.models import default_capacity


class ConcurrencyLimiter:
    """
    At most `capacity` holders at once. Tracks active and peak holders so a run
    can report (and tests can assert) how much I/O actually overlapped.
    """

    def __init__(self, capacity: Optional[int] = None):
        if capacity is None:
            capacity = default_capacity()
        if capacity < 1:
            raise ValueError("Limiter capacity must be at least 1")
        self.capacity = capacity
        self._semaphore = threading.BoundedSemaphore(capacity)
        self._lock = threading.Lock()
        self._active = 0
        self._peak = 0

    def acquire(self) -> None:
        """Blocks until a slot is free."""
        self._semaphore.acquire()
        with self._lock:
            self._active += 1
            if self._active > self._peak:
                self._peak = self._active

    def release(self) -> None:
        with self._lock:
            if self._active == 0:
                raise RuntimeError("release() without a matching acquire()")
            self._active -= 1
        self._semaphore.release()

    @contextmanager
    def slot(self) -> Iterator[None]:
        """Holds one slot for the body of the with-block, released on any exit."""
        self.acquire()
        try:
            yield
        finally:
            self.release()

    @property
    def active(self) -> int:
        with self._lock:
            return self._active

    @property
    def peak(self) -> int:
        with self._lock:
            return self._peak

    def __repr__(self):
        return f"<ConcurrencyLimiter capacity={self.capacity}, active={self.active}, peak={self.peak}>"
