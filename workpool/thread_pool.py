"""A fixed set of worker threads that run queued callbacks."""

from __future__ import annotations

import errno
import logging
import os
import threading
from types import TracebackType
from typing import Any

from workpool.sync import Condition, Mutex, ThreadingError
from workpool.task_queue import TaskFunction, TaskQueue, TaskQueueError
from workpool.threads import Thread

_log = logging.getLogger(__name__)


class ThreadPoolError(OSError):
    """Raised when the pool cannot accept or start work; ``errno`` tells why."""

    def __init__(self, code: int, message: str | None = None) -> None:
        super().__init__(code, message or os.strerror(code))


class ThreadPool:
    """Runs callbacks on *nthreads* worker threads, queueing up to *capacity*."""

    def __init__(self, capacity: int, nthreads: int) -> None:
        if capacity <= 0:
            raise ThreadPoolError(errno.ERANGE, "task capacity must be positive")
        if nthreads < 0:
            raise ThreadPoolError(errno.ERANGE, "thread count must not be negative")
        self._queue = TaskQueue(capacity)
        self._mutex = Mutex()
        self._condition = Condition()
        self._stopping = False
        self._joined = False
        self.nthreads = nthreads
        self._threads: list[Thread] = []
        try:
            for _ in range(nthreads):
                self._threads.append(Thread(self._loop, None))
        except ThreadingError as exc:
            self.stop()
            for thread in self._threads:
                thread.join()
            self._queue.destroy()
            self._joined = True
            raise ThreadPoolError(errno.EAGAIN, "could not start worker thread") from exc

    @property
    def stopping(self) -> bool:
        with self._mutex:
            return self._stopping

    @property
    def joined(self) -> bool:
        return self._joined

    def _loop(self, _arg: Any) -> int:
        while True:
            with self._mutex:
                while not self._stopping and not self._queue:
                    self._condition.wait(self._mutex)
                if self._stopping:
                    return 0
                task = self._queue.pop()
            if task is not None:
                try:
                    task.run(0)
                except Exception:
                    _log.exception("task raised an exception")

    def push(self, function: TaskFunction, capture: Any = None) -> None:
        """Queue ``function(0, capture)`` to run on a worker.

        If the pool is stopping the function is called at once with
        ECANCELED; if the queue is full it is called with ENOSPC. Either
        way ThreadPoolError is raised.
        """
        with self._mutex:
            if self._stopping:
                cancelled = True
            else:
                cancelled = False
                try:
                    self._queue.push(function, capture)
                except TaskQueueError as exc:
                    raise ThreadPoolError(exc.errno, exc.strerror) from exc
        if cancelled:
            function(errno.ECANCELED, capture)
            raise ThreadPoolError(errno.ECANCELED, "thread pool is stopping")
        self._condition.signal()

    def stop(self) -> None:
        """Tell the workers to finish; queued tasks no longer start."""
        with self._mutex:
            if self._stopping:
                return
            self._stopping = True
        self._condition.broadcast()

    def join(self) -> None:
        """Wait for every worker, then cancel the tasks still queued."""
        if self._joined:
            return
        for thread in self._threads:
            thread.join()
        self._queue.destroy()
        self._joined = True

    def __enter__(self) -> ThreadPool:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.stop()
        self.join()


_global_lock = threading.Lock()
_global_pool: ThreadPool | None = None


def init_global_pool(capacity: int, nthreads: int) -> ThreadPool:
    """Create the process-wide pool used by submit.

    Raises ThreadPoolError with EFAULT while an earlier global pool has
    not been joined.
    """
    global _global_pool
    with _global_lock:
        if _global_pool is not None and not _global_pool.joined:
            raise ThreadPoolError(errno.EFAULT, "global thread pool is already running")
        _global_pool = ThreadPool(capacity, nthreads)
        return _global_pool


def global_pool() -> ThreadPool:
    """Return the process-wide pool."""
    with _global_lock:
        if _global_pool is None:
            raise ThreadPoolError(errno.EFAULT, "global thread pool is not initialised")
        return _global_pool


def submit(function: TaskFunction, capture: Any = None) -> None:
    """Queue ``function(error, capture)`` on the process-wide pool."""
    global_pool().push(function, capture)