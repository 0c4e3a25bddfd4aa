"""Executor Protocol — where asynchronous operations run.

Asynchronous operations are handed to an executor as a zero-argument
unit of work and the dispatching thread returns immediately.  The unit
of work does its own error handling and response writing, so the
executor only has to run it.

ARCHITECTURE
────────────
::

    Executor (Protocol)
      ├── .submit(task)   ─ schedule task, return a Future
      └── .shutdown(wait) ─ stop accepting work

    Implementations:
      LocalExecutor   ─ ThreadPool        (default)
      InlineExecutor  ─ runs in caller    (testing, single-threaded hosts)
"""

from collections.abc import Callable
from concurrent.futures import Future
from typing import Protocol, runtime_checkable


@runtime_checkable
class Executor(Protocol):
    """Runs units of work off the dispatching thread."""

    def submit(self, task: Callable[[], None]) -> Future:
        """Schedule ``task``. Must not wait for it to finish."""
        ...

    def shutdown(self, wait: bool = True) -> None:
        """Release resources; with ``wait`` drain submitted work first."""
        ...
