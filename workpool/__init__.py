"""A fixed-size thread pool with a bounded task queue and C11-style threading primitives."""

__version__ = "0.1.0"

__all__ = ["app", "sync", "task_queue", "thread_pool", "threads"]