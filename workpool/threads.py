"""Threads, thread-specific storage and one-time initialisation."""

from __future__ import annotations

import threading
import time
from typing import Any, Callable

from workpool.sync import ThreadingError, ThreadStatus

TSS_DTOR_ITERATIONS = 4
"""How many rounds of destructor calls are made when a thread ends."""

_local = threading.local()


class ThreadExit(BaseException):
    """Raised by thread_exit to end the calling thread with a result."""

    def __init__(self, result: Any = 0) -> None:
        super().__init__(result)
        self.result = result


def _tss_values() -> dict[ThreadSpecific, Any]:
    values = getattr(_local, "tss", None)
    if values is None:
        values = {}
        _local.tss = values
    return values


def _run_tss_destructors() -> None:
    values = getattr(_local, "tss", None)
    if not values:
        return
    again = True
    iteration = 0
    while iteration < TSS_DTOR_ITERATIONS and again:
        again = False
        for key, value in list(values.items()):
            if value is None:
                continue
            values[key] = None
            if key._destructor is not None and not key._deleted:
                again = True
                key._destructor(value)
        iteration += 1
    values.clear()


class Thread:
    """A thread that runs ``function(arg)`` as soon as it is created."""

    def __init__(self, function: Callable[[Any], Any], arg: Any = None) -> None:
        self._function = function
        self._arg = arg
        self._result: Any = None
        self._error: BaseException | None = None
        self._state_lock = threading.Lock()
        self._joined = False
        self._detached = False
        self._thread = threading.Thread(target=self._run, daemon=True)
        try:
            self._thread.start()
        except RuntimeError as exc:
            raise ThreadingError("could not create thread") from exc

    @classmethod
    def _adopt(cls, native: threading.Thread) -> Thread:
        obj = cls.__new__(cls)
        obj._function = None
        obj._arg = None
        obj._result = None
        obj._error = None
        obj._state_lock = threading.Lock()
        obj._joined = False
        obj._detached = False
        obj._thread = native
        return obj

    def _run(self) -> None:
        _local.thread = self
        try:
            self._result = self._function(self._arg)
        except ThreadExit as stop:
            self._result = stop.result
        except BaseException as exc:  # handed to whoever joins
            self._error = exc
        finally:
            _run_tss_destructors()

    @property
    def ident(self) -> int | None:
        return self._thread.ident

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def join(self) -> Any:
        """Wait for the thread to end and return its result.

        An exception that ended the thread is raised again here.
        """
        if self._thread is threading.current_thread():
            raise ThreadingError("a thread cannot join itself")
        with self._state_lock:
            if self._detached:
                raise ThreadingError("thread is detached")
            if self._joined:
                raise ThreadingError("thread was already joined")
            self._joined = True
        self._thread.join()
        if self._error is not None:
            raise self._error
        return self._result

    def detach(self) -> None:
        """Give up the right to join this thread."""
        with self._state_lock:
            if self._detached or self._joined:
                raise ThreadingError("thread is not joinable")
            self._detached = True

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Thread):
            return NotImplemented
        return self._thread is other._thread

    def __hash__(self) -> int:
        return hash(id(self._thread))

    def __repr__(self) -> str:
        return f"Thread(ident={self.ident!r})"


def current_thread() -> Thread:
    """Return the Thread object of the calling thread."""
    thread = getattr(_local, "thread", None)
    if thread is None:
        thread = Thread._adopt(threading.current_thread())
        _local.thread = thread
    return thread


def thread_exit(result: Any = 0) -> None:
    """End the calling thread; *result* is what join returns."""
    raise ThreadExit(result)


def sleep(duration: float) -> None:
    """Suspend the calling thread for *duration* seconds."""
    if duration < 0:
        raise ValueError("sleep duration must not be negative")
    time.sleep(duration)


def yield_thread() -> None:
    """Let other threads run."""
    time.sleep(0)


class ThreadSpecific:
    """A value that each thread holds separately.

    The optional destructor is called with a thread's value when a thread
    created through Thread ends while holding a value.
    """

    def __init__(self, destructor: Callable[[Any], None] | None = None) -> None:
        self._destructor = destructor
        self._deleted = False

    def _check(self) -> None:
        if self._deleted:
            raise ThreadingError("thread-specific storage was deleted", ThreadStatus.ERROR)

    def get(self) -> Any:
        """Return the calling thread's value, or None."""
        self._check()
        return _tss_values().get(self)

    def set(self, value: Any) -> None:
        """Set the calling thread's value."""
        self._check()
        _tss_values()[self] = value

    def delete(self) -> None:
        """Release the storage; no destructor is called afterwards."""
        self._check()
        self._deleted = True
        self._destructor = None
        _tss_values().pop(self, None)


class OnceFlag:
    """Records whether a call_once function has run."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.done = False


def call_once(flag: OnceFlag, func: Callable[[], Any]) -> None:
    """Run *func* once for *flag*; other callers wait until it has finished."""
    if flag.done:
        return
    with flag._lock:
        if not flag.done:
            func()
            flag.done = True