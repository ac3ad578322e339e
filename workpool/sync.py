"""Mutexes and condition variables with absolute UTC deadlines."""

from __future__ import annotations

import enum
import threading
import time
from collections import deque
from types import TracebackType


class ThreadStatus(enum.IntEnum):
    """Result codes used by the threading primitives."""

    ERROR = 0
    SUCCESS = 1
    TIMEDOUT = 2
    BUSY = 3
    NOMEM = 4


class MutexType(enum.IntFlag):
    """Kinds of mutex; RECURSIVE may be combined with PLAIN or TIMED."""

    PLAIN = 0
    TIMED = 1
    RECURSIVE = 2


class ThreadingError(RuntimeError):
    """Raised when a threading primitive cannot honour a request."""

    def __init__(self, message: str, status: ThreadStatus = ThreadStatus.ERROR) -> None:
        super().__init__(message)
        self.status = status


def utc_now() -> float:
    """Return the current UTC time as seconds since the epoch."""
    return time.time()


def _remaining(deadline: float) -> float:
    return deadline - utc_now()


class Mutex:
    """A mutual-exclusion lock, optionally recursive."""

    def __init__(self, kind: MutexType = MutexType.PLAIN) -> None:
        self.kind = MutexType(kind)
        self._lock = threading.RLock() if self.kind & MutexType.RECURSIVE else threading.Lock()

    @property
    def recursive(self) -> bool:
        return bool(self.kind & MutexType.RECURSIVE)

    def lock(self) -> None:
        """Block until the mutex is held by the calling thread."""
        if not self._lock.acquire():
            raise ThreadingError("could not lock mutex")

    def timed_lock(self, deadline: float) -> bool:
        """Lock, giving up at the absolute UTC time *deadline*.

        Returns True when the lock was taken and False on time-out.
        """
        remaining = _remaining(deadline)
        if remaining <= 0:
            return self._lock.acquire(blocking=False)
        return self._lock.acquire(timeout=remaining)

    def try_lock(self) -> bool:
        """Take the lock if it is free; return whether it was taken."""
        return self._lock.acquire(blocking=False)

    def unlock(self) -> None:
        """Release the mutex."""
        try:
            self._lock.release()
        except RuntimeError as exc:
            raise ThreadingError("mutex is not locked") from exc

    def __enter__(self) -> Mutex:
        self.lock()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.unlock()


class Condition:
    """A condition variable that is used together with any Mutex."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._waiters: deque[threading.Lock] = deque()

    def signal(self) -> None:
        """Wake one waiting thread, if any."""
        with self._guard:
            if self._waiters:
                self._waiters.popleft().release()

    def broadcast(self) -> None:
        """Wake every waiting thread."""
        with self._guard:
            while self._waiters:
                self._waiters.popleft().release()

    def _enqueue(self) -> threading.Lock:
        waiter = threading.Lock()
        waiter.acquire()
        with self._guard:
            self._waiters.append(waiter)
        return waiter

    def wait(self, mutex: Mutex) -> None:
        """Release *mutex*, wait for a signal, then lock *mutex* again."""
        waiter = self._enqueue()
        mutex.unlock()
        try:
            waiter.acquire()
        finally:
            mutex.lock()

    def timed_wait(self, mutex: Mutex, deadline: float) -> bool:
        """Like wait, but give up at the absolute UTC time *deadline*.

        Returns True when signalled and False on time-out. The mutex is
        held again on return either way.
        """
        waiter = self._enqueue()
        mutex.unlock()
        try:
            remaining = _remaining(deadline)
            if remaining > 0:
                signalled = waiter.acquire(timeout=remaining)
            else:
                signalled = waiter.acquire(blocking=False)
            if not signalled:
                with self._guard:
                    try:
                        self._waiters.remove(waiter)
                    except ValueError:
                        # A signal arrived between the time-out and removal.
                        signalled = True
            return signalled
        finally:
            mutex.lock()