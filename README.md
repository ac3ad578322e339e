# workpool

A small thread pool for running callbacks on a fixed set of worker threads.

Work is kept in a bounded, first-in first-out task queue. Each task is a
function together with a captured value. A worker thread takes the next task
and calls `function(0, capture)`. A task that cannot be queued, or that is
still waiting when the pool is joined, is not silently dropped: its function
is still called, with an `errno` code (`ENOSPC` or `ECANCELED`), so it can
clean up.

The package also carries the threading building blocks the pool is made of,
modelled on the C11 threads interface: mutexes, condition variables, threads,
thread-specific storage and one-time initialisation.

## Installation

```
pip install workpool
```

Python 3.10 or later is required. The package has no dependencies outside the
standard library.

## Using a pool

```python
from workpool.thread_pool import ThreadPool

def task(error, capture):
    if error:
        print("cancelled:", capture)
    else:
        print("running:", capture)

with ThreadPool(100, 4) as pool:   # room for 100 queued tasks, 4 workers
    pool.push(task, "first job")
    pool.push(task, "second job")
```

`ThreadPool(capacity, nthreads)` starts its workers straight away. A capacity
below 1 or a negative thread count raises `ThreadPoolError` with `ERANGE`.

- `push(function, capture)` queues a task. If the pool is stopping, the
  function is called at once with `ECANCELED`; if the queue is full, with
  `ENOSPC`. In both cases `ThreadPoolError` is then raised, its `errno` set to
  the same code.
- `stop()` tells the workers to finish; tasks still queued no longer start.
- `join()` waits for every worker, then calls each task still queued with
  `ECANCELED`. Calling it again does nothing.
- Leaving the `with` block stops and joins the pool.

An exception raised by a task on a worker is logged through the
`workpool.thread_pool` logger and the worker carries on.

### A process-wide pool

For code that just wants to hand work off, there is one shared pool:

```python
from workpool.thread_pool import init_global_pool, global_pool, submit

init_global_pool(100, 10)
submit(task, "background job")

pool = global_pool()
pool.stop()
pool.join()
```

`init_global_pool` raises `ThreadPoolError` with `EFAULT` while an earlier
global pool has not been joined; `global_pool` and `submit` raise it with
`EFAULT` before any global pool exists.

## The task queue on its own

`workpool.task_queue.TaskQueue(capacity)` is the bounded queue of `Task`
entries the pool uses; a capacity below 1 raises `ValueError`.

- `push(function, capture)` adds a task. When the queue is full the function
  is called at once with `ENOSPC` and `TaskQueueError` is raised.
- `pop()` removes and returns the oldest `Task`, or `None` if the queue is
  empty. `Task.run(error)` calls `function(error, capture)`.
- `len(queue)` tells how many tasks are waiting.
- `swap(other)` exchanges contents and capacity with another queue.
- `destroy()` calls every waiting task with `ECANCELED`, oldest first, and
  empties the queue.

## Threading primitives

`workpool.sync` provides:

- `Mutex(kind)` with `lock`, `try_lock`, `timed_lock(deadline)` and `unlock`,
  usable as a context manager. `kind` is a `MutexType` (`PLAIN`, `TIMED`,
  `RECURSIVE`); `RECURSIVE` makes the mutex re-entrant. `try_lock` and
  `timed_lock` return whether the lock was taken; unlocking a mutex that is
  not held raises `ThreadingError`.
- `Condition()` with `signal`, `broadcast`, `wait(mutex)` and
  `timed_wait(mutex, deadline)`; `timed_wait` returns `True` when signalled
  and `False` on time-out, and holds the mutex again on return either way.
- `utc_now()` for building absolute deadlines (seconds since the epoch).
- `ThreadStatus` for the outcome of an operation and `ThreadingError` for
  failures.

`workpool.threads` provides:

- `Thread(function, arg)`, which starts `function(arg)` at once. `join()`
  returns the function's result, or raises again the exception that ended
  the thread; `detach()` gives up the right to join. Threads compare equal
  when they refer to the same thread, and `current_thread()` returns the
  caller's `Thread`.
- `thread_exit(result)` to end the calling thread early, signalled through
  `ThreadExit`; `join` then returns `result`.
- `sleep(duration)` (a negative duration raises `ValueError`) and
  `yield_thread()`.
- `ThreadSpecific(destructor)` with `get`, `set` and `delete` for per-thread
  values. When a thread started through `Thread` ends, the destructor is
  called with each value it still holds.
- `OnceFlag` and `call_once(flag, func)` to run initialisation exactly once.

## The demonstration program

```
workpool-demo
```

starts the shared pool (100 queued tasks, ten workers), submits one job
through `workpool.app.do_this_async`, whose completion callback
`then_do_that` prints `Result: 0, Content: result`, waits five seconds, then
stops and joins the pool. Options: `--wait SECONDS`, `--capacity N` and
`--threads N`. It exits with status 1 if the pool cannot be started.

The same from Python:

```python
from workpool.app import do_this_async, then_do_that
from workpool.thread_pool import init_global_pool, global_pool

init_global_pool(100, 10)
password = "password"
do_this_async("username", password, then_do_that, None)

pool = global_pool()
pool.stop()
pool.join()
```

`do_this_async(user, password, callback, data)` calls
`callback(error, content, data)` exactly once: with error 0 when the job ran
on the pool, or with the pool's `errno` code when it could not be queued.
`data` is copied before it is handed over.

## Running the tests

```
pip install workpool[test]
pytest
```