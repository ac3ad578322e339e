import threading
import time

import pytest

from workpool.sync import (
    Condition,
    Mutex,
    MutexType,
    ThreadingError,
    ThreadStatus,
    utc_now,
)


def _run(target):
    thread = threading.Thread(target=target)
    thread.start()
    thread.join(5)
    return thread


def test_mutex_type_flags_combine():
    kind = MutexType.TIMED | MutexType.RECURSIVE
    assert Mutex(kind).recursive is True
    assert Mutex(MutexType.PLAIN).recursive is False


def test_try_lock_reports_busy_from_other_thread():
    mutex = Mutex()
    mutex.lock()
    results = []
    _run(lambda: results.append(mutex.try_lock()))
    assert results == [False]
    mutex.unlock()
    assert mutex.try_lock() is True
    mutex.unlock()


def test_recursive_mutex_relocks_in_same_thread():
    mutex = Mutex(MutexType.RECURSIVE)
    mutex.lock()
    assert mutex.try_lock() is True
    mutex.unlock()
    mutex.unlock()
    with pytest.raises(ThreadingError):
        mutex.unlock()


def test_unlock_of_unlocked_mutex_raises():
    with pytest.raises(ThreadingError) as info:
        Mutex().unlock()
    assert info.value.status == ThreadStatus.ERROR


def test_timed_lock_free_mutex_succeeds():
    mutex = Mutex(MutexType.TIMED)
    assert mutex.timed_lock(utc_now() + 1.0) is True
    mutex.unlock()


def test_timed_lock_times_out_when_held():
    mutex = Mutex(MutexType.TIMED)
    mutex.lock()
    results = []
    _run(lambda: results.append(mutex.timed_lock(utc_now() + 0.05)))
    assert results == [False]
    past = []
    _run(lambda: past.append(mutex.timed_lock(utc_now() - 1.0)))
    assert past == [False]
    mutex.unlock()
    assert mutex.timed_lock(utc_now() + 1.0) is True
    mutex.unlock()


def test_context_manager_locks_and_releases():
    mutex = Mutex()
    with mutex as held:
        assert held is mutex
        inside = []
        _run(lambda: inside.append(mutex.try_lock()))
        assert inside == [False]
    assert mutex.try_lock() is True
    mutex.unlock()


def test_utc_now_tracks_wall_clock():
    before = time.time()
    now = utc_now()
    after = time.time()
    assert before <= now <= after


def test_signal_wakes_waiter():
    mutex = Mutex()
    cond = Condition()
    state = {"ready": False, "seen": False}

    def waiter():
        with mutex:
            while not state["ready"]:
                cond.wait(mutex)
            state["seen"] = True

    thread = threading.Thread(target=waiter)
    thread.start()
    time.sleep(0.05)
    with mutex:
        state["ready"] = True
    cond.signal()
    thread.join(5)
    assert not thread.is_alive()
    assert state["seen"] is True
    assert mutex.try_lock() is True
    mutex.unlock()


def test_broadcast_wakes_all_waiters():
    mutex = Mutex()
    cond = Condition()
    state = {"go": False, "woken": 0}

    def waiter():
        with mutex:
            while not state["go"]:
                cond.wait(mutex)
            state["woken"] += 1

    threads = [threading.Thread(target=waiter) for _ in range(4)]
    for thread in threads:
        thread.start()
    time.sleep(0.05)
    with mutex:
        state["go"] = True
    cond.broadcast()
    for thread in threads:
        thread.join(5)
    assert state["woken"] == len(threads)
    assert mutex.try_lock() is True
    mutex.unlock()


def test_timed_wait_times_out_and_relocks():
    mutex = Mutex()
    cond = Condition()
    mutex.lock()
    assert cond.timed_wait(mutex, utc_now() + 0.05) is False
    others = []
    _run(lambda: others.append(mutex.try_lock()))
    assert others == [False]
    mutex.unlock()


def test_timed_wait_returns_true_when_signalled():
    mutex = Mutex()
    cond = Condition()
    results = []
    started = threading.Event()

    def waiter():
        with mutex:
            started.set()
            results.append(cond.timed_wait(mutex, utc_now() + 5.0))

    thread = threading.Thread(target=waiter)
    thread.start()
    started.wait(5)
    with mutex:
        cond.signal()
    thread.join(5)
    assert results == [True]
    assert mutex.try_lock() is True
    mutex.unlock()


def test_signal_without_waiters_is_not_remembered():
    mutex = Mutex()
    cond = Condition()
    cond.signal()
    cond.broadcast()
    with mutex:
        assert cond.timed_wait(mutex, utc_now() + 0.02) is False