"""A bounded first-in, first-out queue of callbacks waiting to run."""

from __future__ import annotations

import errno
import os
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable

TaskFunction = Callable[[int, Any], None]


class TaskQueueError(OSError):
    """Raised when a task cannot be queued; ``errno`` tells why."""

    def __init__(self, code: int, message: str | None = None) -> None:
        super().__init__(code, message or os.strerror(code))


@dataclass
class Task:
    """A callback and the value it is called with.

    The callback receives an error code (0 when it runs normally) and
    the capture.
    """

    function: TaskFunction
    capture: Any = None

    def run(self, error: int = 0) -> None:
        self.function(error, self.capture)


class TaskQueue:
    """A queue holding at most *capacity* tasks."""

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError("task queue capacity must be positive")
        self.capacity = capacity
        self._tasks: deque[Task] = deque()

    def push(self, function: TaskFunction, capture: Any = None) -> None:
        """Queue ``function(error, capture)``.

        When the queue is full the function is called at once with
        ENOSPC and TaskQueueError is raised.
        """
        if len(self._tasks) >= self.capacity:
            function(errno.ENOSPC, capture)
            raise TaskQueueError(errno.ENOSPC, "task queue is full")
        self._tasks.append(Task(function, capture))

    def pop(self) -> Task | None:
        """Remove and return the oldest task, or None if there is none."""
        if not self._tasks:
            return None
        return self._tasks.popleft()

    def destroy(self) -> None:
        """Call every queued task with ECANCELED, oldest first, and empty the queue."""
        while (task := self.pop()) is not None:
            task.run(errno.ECANCELED)

    def swap(self, other: TaskQueue) -> None:
        """Exchange contents and capacity with *other*."""
        self.capacity, other.capacity = other.capacity, self.capacity
        self._tasks, other._tasks = other._tasks, self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    def __repr__(self) -> str:
        return f"TaskQueue(capacity={self.capacity}, count={len(self)})"