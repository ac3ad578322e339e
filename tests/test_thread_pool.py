import errno
import threading

import pytest

from workpool.thread_pool import (
    ThreadPool,
    ThreadPoolError,
    global_pool,
    init_global_pool,
    submit,
)


def test_zero_capacity_is_range_error():
    with pytest.raises(ThreadPoolError) as info:
        ThreadPool(0, 2)
    assert info.value.errno == errno.ERANGE


def test_task_runs_with_zero_error():
    done = threading.Event()
    seen = []

    def function(error, capture):
        seen.append((error, capture))
        done.set()

    with ThreadPool(10, 2) as pool:
        assert pool.stopping is False
        pool.push(function, "payload")
        assert done.wait(5)
    assert seen == [(0, "payload")]
    assert pool.joined is True


def test_all_tasks_run():
    lock = threading.Lock()
    results = []
    finished = threading.Semaphore(0)

    def function(error, capture):
        with lock:
            results.append((error, capture))
        finished.release()

    with ThreadPool(100, 4) as pool:
        for i in range(50):
            pool.push(function, i)
        for _ in range(50):
            assert finished.acquire(timeout=5)
    assert sorted(c for _, c in results) == list(range(50))
    assert all(e == 0 for e, _ in results)
    assert pool.stopping is True
    assert pool.joined is True


def test_push_after_stop_is_cancelled():
    calls = []
    pool = ThreadPool(4, 1)
    pool.stop()
    with pytest.raises(ThreadPoolError) as info:
        pool.push(lambda e, c: calls.append((e, c)), "late")
    pool.join()
    assert info.value.errno == errno.ECANCELED
    assert calls == [(errno.ECANCELED, "late")]


def test_full_queue_raises_and_pending_cancelled_on_join():
    calls = []

    def function(error, capture):
        calls.append((error, capture))

    pool = ThreadPool(1, 0)
    pool.push(function, "queued")
    with pytest.raises(ThreadPoolError) as info:
        pool.push(function, "overflow")
    assert info.value.errno == errno.ENOSPC
    pool.stop()
    pool.join()
    assert calls == [(errno.ENOSPC, "overflow"), (errno.ECANCELED, "queued")]


def test_stop_is_idempotent():
    pool = ThreadPool(2, 2)
    pool.stop()
    pool.stop()
    pool.join()
    assert pool.stopping is True
    assert pool.joined is True


def test_failing_task_does_not_kill_worker():
    done = threading.Event()

    def bad(error, capture):
        raise RuntimeError("boom")

    def good(error, capture):
        done.set()

    with ThreadPool(4, 1) as pool:
        pool.push(bad)
        pool.push(good)
        assert done.wait(5)
        assert pool.stopping is False
    assert pool.joined is True


def test_global_pool_lifecycle():
    done = threading.Event()
    pool = init_global_pool(10, 2)
    try:
        assert global_pool() is pool
        with pytest.raises(ThreadPoolError) as info:
            init_global_pool(10, 2)
        assert info.value.errno == errno.EFAULT
        submit(lambda e, c: done.set())
        assert done.wait(5)
    finally:
        pool.stop()
        pool.join()
    again = init_global_pool(5, 1)
    try:
        assert global_pool() is again
    finally:
        again.stop()
        again.join()