"""Demonstration of handing work to the global pool and getting a callback."""

from __future__ import annotations

import argparse
import copy
from dataclasses import dataclass
from typing import Any, Callable

from workpool.thread_pool import ThreadPoolError, global_pool, init_global_pool
from workpool.threads import sleep

ResultCallback = Callable[[int, str, Any], None]

RESULT_CONTENT = "result"


@dataclass
class Capture:
    """Everything the background task needs to do its work and report back."""

    user: str
    password: str
    callback: ResultCallback
    data: Any = None


def _execute(error: int, capture: Capture) -> None:
    capture.callback(error, RESULT_CONTENT, capture.data)


def do_this_async(
    user: str,
    password: str,
    callback: ResultCallback,
    data: Any = None,
) -> None:
    """Run the work on the global pool and report through *callback*.

    The callback is always called exactly once, as
    ``callback(error, content, data)``: with error 0 when the work ran, or
    with an errno value when the pool could not run it. *data* is copied
    before it is handed over.
    """
    capture = Capture(
        user=str(user),
        password=str(password),
        callback=callback,
        data=copy.copy(data) if data is not None else None,
    )
    try:
        global_pool().push(_execute, capture)
    except ThreadPoolError:
        # The pool has already handed the error to the callback.
        pass


def then_do_that(result: int, content: str, data: Any) -> None:
    """Print the outcome of the background work."""
    print(f"Result: {result}, Content: {content}")


def main(argv: list[str] | None = None) -> int:
    """Start the pool, run one task, wait, then shut the pool down."""
    parser = argparse.ArgumentParser(
        prog="workpool",
        description="Run one task on a pool of worker threads.",
    )
    parser.add_argument(
        "--wait",
        type=float,
        default=5.0,
        help="seconds to wait before stopping the pool (default: 5)",
    )
    parser.add_argument("--capacity", type=int, default=100, help="task queue capacity")
    parser.add_argument("--threads", type=int, default=10, help="number of worker threads")
    args = parser.parse_args(argv)

    try:
        pool = init_global_pool(args.capacity, args.threads)
    except ThreadPoolError:
        return 1

    do_this_async("username", "password", then_do_that, None)

    print(f"waiting {args.wait:g}s.")
    sleep(args.wait)

    print("stopping.")
    pool.stop()

    print("join threads.")
    pool.join()

    print("All tasks completed.")
    return 0