"""Inline Executor — runs submitted work immediately in the caller.

Useful in tests and in hosts that cannot spare threads: an
"asynchronous" operation simply completes before ``dispatch`` returns.
"""

from collections.abc import Callable
from concurrent.futures import Future


class InlineExecutor:
    """Executes work synchronously; the returned Future is already done."""

    def __init__(self) -> None:
        self.submitted = 0

    def submit(self, task: Callable[[], None]) -> Future:
        self.submitted += 1
        future: Future = Future()
        try:
            future.set_result(task())
        except Exception as e:
            future.set_exception(e)
        return future

    def shutdown(self, wait: bool = True) -> None:
        """Nothing to release."""
