"""Local Executor — ThreadPool-based execution of asynchronous operations.

The current ``contextvars`` context is copied into the worker thread
at submit time, so log entries from an asynchronous operation carry
the request and session of the dispatch that started it.

ARCHITECTURE
────────────
::

    LocalExecutor(max_workers=4)
      ├── .submit(task)     ─ submit to ThreadPool
      ├── .pending          ─ tasks submitted but not finished
      └── .shutdown()       ─ drain pool
"""

import contextvars
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor

from apigate.core.logging import get_logger

log = get_logger(__name__)


class LocalExecutor:
    """ThreadPoolExecutor-based executor.

    Example:
        >>> executor = LocalExecutor(max_workers=4)
        >>> future = executor.submit(lambda: print("off-thread"))
        >>> executor.shutdown()
    """

    def __init__(self, max_workers: int = 4, thread_name_prefix: str = "apigate-async"):
        """Initialize with worker pool.

        Args:
            max_workers: ThreadPool size (default: 4)
            thread_name_prefix: Name prefix of the worker threads
        """
        self.pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=thread_name_prefix)
        self._pending = 0
        self._pending_lock = threading.Lock()

    def submit(self, task: Callable[[], None]) -> Future:
        """Queue ``task`` in the pool and return immediately."""
        ctx = contextvars.copy_context()
        with self._pending_lock:
            self._pending += 1
        future = self.pool.submit(ctx.run, task)
        future.add_done_callback(self._on_done)
        return future

    def _on_done(self, future: Future) -> None:
        with self._pending_lock:
            self._pending -= 1
        if not future.cancelled() and future.exception() is not None:
            # Units of work handle their own errors; anything here escaped them.
            log.error("executor.task_failed", error=str(future.exception()))

    @property
    def pending(self) -> int:
        with self._pending_lock:
            return self._pending

    def shutdown(self, wait: bool = True) -> None:
        """Shutdown thread pool.

        Args:
            wait: If True, wait for pending work to complete
        """
        self.pool.shutdown(wait=wait)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown(wait=True)
