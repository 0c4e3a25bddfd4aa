"""Executors for asynchronous operations.

    protocol.py  — Executor protocol
    local.py     — ThreadPool executor (default)
    memory.py    — inline executor (testing)
"""

from apigate.execution.executors.local import LocalExecutor
from apigate.execution.executors.memory import InlineExecutor
from apigate.execution.executors.protocol import Executor

__all__ = ["Executor", "LocalExecutor", "InlineExecutor"]
