"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/collector.py
Single-writer aggregation of (fingerprint, path) pairs into a ResultIndex.

Producers only ever put pairs on a queue; one collector thread owns the index,
so no lock is needed around it. The index is frozen and handed out after the
finish signal, which must come after the last pair has been submitted.
"""

import logging
import queue
import threading
from typing import Callable, Optional

from dupwalk.core.models import PendingPair, ResultIndex

logger = logging.getLogger(__name__)

_FINISH = object()


class Collector:
    """
    Consumes PendingPairs on a dedicated thread and builds the ResultIndex.

    Attributes:
        maxsize: Queue bound; producers block while the collector is behind (0 = unbounded)
        progress_interval: Report progress every N pairs
    """

    def __init__(
        self,
        maxsize: int = 0,
        progress_callback: Optional[Callable[[str, int, object], None]] = None,
        progress_interval: int = 500
    ):
        self._queue: "queue.Queue" = queue.Queue(maxsize=maxsize)
        self._index = ResultIndex()
        self._progress_callback = progress_callback
        self._progress_interval = progress_interval
        self._received = 0
        self._finished = False
        self._thread = threading.Thread(target=self._consume, name="dupwalk-collector", daemon=True)

    def start(self) -> "Collector":
        self._thread.start()
        return self

    def submit(self, pair: PendingPair) -> None:
        """Hands one pair to the collector. Blocks while the queue is full."""
        if self._finished:
            raise RuntimeError("Collector already finished")
        self._queue.put(pair)

    def finish(self) -> None:
        """Signals that no further pairs will arrive. Safe to call more than once."""
        if self._finished:
            return
        self._finished = True
        self._queue.put(_FINISH)

    def result(self, timeout: Optional[float] = None) -> ResultIndex:
        """Waits for the collector thread to drain the queue and returns the frozen index."""
        self._thread.join(timeout)
        if self._thread.is_alive():
            raise TimeoutError("Collector did not finish in time")
        return self._index

    @property
    def received(self) -> int:
        return self._received

    def _consume(self) -> None:
        while True:
            item = self._queue.get()
            if item is _FINISH:
                break
            self._index.add(item)
            self._received += 1
            if self._received % self._progress_interval == 0:
                self._report_progress()

        if self._received % self._progress_interval:
            self._report_progress()

        self._index.freeze()
        logger.debug(f"Collected {self._received} fingerprints into {len(self._index)} keys")

    def _report_progress(self) -> None:
        if not self._progress_callback:
            return
        try:
            self._progress_callback("hashing", self._received, None)
        except Exception as e:
            logger.warning(f"Error in progress callback: {e}")
