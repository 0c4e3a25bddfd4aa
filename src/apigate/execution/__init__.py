"""Execution layer — session state, lock groups and executors."""

from apigate.execution.concurrency import LockManager
from apigate.execution.executors import Executor, InlineExecutor, LocalExecutor
from apigate.execution.session import NO_ACCESS, InstanceKey, LockKey, SessionState

__all__ = [
    "SessionState",
    "InstanceKey",
    "LockKey",
    "NO_ACCESS",
    "LockManager",
    "Executor",
    "LocalExecutor",
    "InlineExecutor",
]
