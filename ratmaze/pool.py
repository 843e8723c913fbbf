"""
Bounded worker pool for sibling branches.

Capacity is counted in slots. A dispatch reserves one slot per task up front
and the slot is given back when the task returns or is cancelled, so the
number of dispatched, unfinished tasks never exceeds the number of worker
threads. A branch that blocks on its children therefore never waits on a
task stuck behind it in the executor queue.
"""

import logging
import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, List, Optional, Sequence

logger = logging.getLogger(__name__)


def default_pool_size() -> int:
    return os.cpu_count() or 1


class WorkerPool:
    def __init__(self, max_workers: Optional[int] = None, name: str = "ratmaze"):
        if max_workers is None:
            max_workers = default_pool_size()
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.max_workers = max_workers
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=name)
        self._slots_lock = threading.Lock()
        self._active = 0
        self._dispatched = 0
        self._closed = False

    def active_count(self) -> int:
        """Slots currently held. Read without locking; callers treat it as a hint."""
        return self._active

    def has_capacity(self, needed: int = 1) -> bool:
        return not self._closed and self._active + needed <= self.max_workers

    @property
    def dispatched(self) -> int:
        return self._dispatched

    @property
    def closed(self) -> bool:
        return self._closed

    def try_dispatch(self, tasks: Sequence[Callable[[], bool]]) -> Optional[List[Future]]:
        """
        Submit every task, or none of them. Returns the futures in the same
        order as `tasks`, or None when the pool lacks a free slot for each
        task (the caller then runs the work inline).
        """
        needed = len(tasks)
        with self._slots_lock:
            if self._closed or self._active + needed > self.max_workers:
                return None
            self._active += needed
            self._dispatched += needed
        futures = []
        try:
            for task in tasks:
                fut = self._executor.submit(self._run_slot, task)
                fut.add_done_callback(self._release_if_cancelled)
                futures.append(fut)
        except RuntimeError:
            # Executor shut down between the check and submit.
            for fut in futures:
                fut.cancel()
            self._release(needed - len(futures))
            logger.debug("Dispatch refused: pool is shutting down")
            return None
        return futures

    def _run_slot(self, task: Callable[[], bool]) -> bool:
        try:
            return task()
        finally:
            self._release(1)

    def _release_if_cancelled(self, fut: Future):
        # A cancelled task never reaches _run_slot, so its slot comes back here.
        if fut.cancelled():
            self._release(1)

    def _release(self, count: int):
        if count <= 0:
            return
        with self._slots_lock:
            self._active -= count

    def cancel_all(self, wait: bool = False):
        """
        Stop accepting work and drop everything still queued. Tasks already
        running finish on their own.
        """
        with self._slots_lock:
            if self._closed:
                return
            self._closed = True
        logger.debug(f"Cancelling worker pool (active={self._active})")
        self._executor.shutdown(wait=wait, cancel_futures=True)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.cancel_all(wait=True)
        return False
