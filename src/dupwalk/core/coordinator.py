"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/coordinator.py
Termination detection for a task graph whose size is only known at runtime.

The outstanding count starts at 1 for the root task. A task registers each child
before submitting it and reports its own completion only after all of its
registrations, so the count can reach zero exactly once: when no task is running
and none can be spawned any more. That moment wakes `wait()` and fires the
completion listeners (the collector's finish signal).

The coordinator is also the run's failure sink. Under FAIL_FAST the first
failure aborts the run: tasks that start afterwards drain without doing work.
Under COLLECT scan failures are recorded and the run carries on.
"""

import logging
import threading
from concurrent.futures import Executor
from typing import Callable, List, Optional

from dupwalk.core.errors import ScanError
from dupwalk.core.models import ErrorPolicy, ScanFailure, ScanStats

logger = logging.getLogger(__name__)


class Coordinator:
    """Wait-group over dynamically spawned tasks plus the run's error policy."""

    def __init__(self, error_policy: ErrorPolicy = ErrorPolicy.FAIL_FAST, stats: Optional[ScanStats] = None):
        self.error_policy = error_policy
        self.stats = stats if stats is not None else ScanStats()
        self._cond = threading.Condition()
        self._outstanding = 1
        self._completed = False
        self._listeners: List[Callable[[], None]] = []
        self._error: Optional[BaseException] = None
        self._aborted = threading.Event()

    # =============================
    # Task accounting
    # =============================

    def register(self) -> None:
        """Counts one more outstanding task. Must happen before the task is submitted."""
        with self._cond:
            if self._completed:
                raise RuntimeError("Cannot register a task after the run completed")
            self._outstanding += 1

    def done(self) -> None:
        """Marks one task finished. The task's own registrations must already be done."""
        with self._cond:
            if self._outstanding <= 0:
                raise RuntimeError("done() called more times than tasks were registered")
            self._outstanding -= 1
            if self._outstanding > 0:
                return
            self._completed = True
            listeners = list(self._listeners)
            self._cond.notify_all()

        logger.debug("All tasks finished")
        for listener in listeners:
            listener()

    def add_listener(self, listener: Callable[[], None]) -> None:
        """Registers a callback fired once when the outstanding count reaches zero."""
        with self._cond:
            if not self._completed:
                self._listeners.append(listener)
                return
        listener()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Blocks until every registered task is done. Returns False on timeout."""
        with self._cond:
            return self._cond.wait_for(lambda: self._outstanding == 0, timeout)

    @property
    def outstanding(self) -> int:
        with self._cond:
            return self._outstanding

    @property
    def completed(self) -> bool:
        with self._cond:
            return self._completed

    def spawn(self, executor: Executor, task: Callable, *args) -> None:
        """Registers a task and submits it. The registration is undone if submit fails."""
        self.register()
        try:
            executor.submit(self.run_task, task, *args)
        except BaseException:
            self.done()
            raise

    def run_task(self, task: Callable, *args) -> None:
        """Runs one task body and reports its completion exactly once."""
        try:
            if not self.aborted:
                task(*args)
        except ScanError as e:
            self.fail(e)
        except Exception as e:
            logger.exception("Unexpected error in scan task")
            self.fail(e)
        finally:
            self.done()

    # =============================
    # Failures
    # =============================

    def fail(self, error: BaseException) -> None:
        """
        Records a task failure according to the error policy.
        Anything other than a ScanError is always fatal.
        """
        if isinstance(error, ScanError) and self.error_policy is ErrorPolicy.COLLECT:
            logger.warning(f"Skipping {error.path}: {error}")
            self.stats.add_failure(ScanFailure(path=error.path, kind=error.kind, message=str(error)))
            return

        with self._cond:
            if self._error is None:
                self._error = error
                logger.error(f"Aborting scan: {error}")
        self._aborted.set()

    @property
    def aborted(self) -> bool:
        return self._aborted.is_set()

    @property
    def error(self) -> Optional[BaseException]:
        with self._cond:
            return self._error

    def raise_if_failed(self) -> None:
        error = self.error
        if error is not None:
            raise error

    def __repr__(self):
        return f"<Coordinator outstanding={self.outstanding}, aborted={self.aborted}>"
