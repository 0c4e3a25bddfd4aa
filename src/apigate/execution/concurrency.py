"""Lock Manager — per-session, per-group admission control.

WHY
───
Two invocations in the same lock group must never interleave against
the shared per-session handler state.  Rather than queueing, the
second one is rejected: callers are never stalled behind a long
running operation.

ARCHITECTURE
────────────
::

    LockManager(owner)
      ├── .get_lock(session, group)  ─ lazily created, None for ""
      └── .try_acquire(session, group) ─ non-blocking; AsyncBusyError if held

    Lock key: LockKey(owner, group), stored on the SessionState.

Example::

    locks = LockManager("shop.api")
    lock = locks.try_acquire(session, "checkout")
    try:
        run_checkout()
    finally:
        if lock is not None:
            lock.release()
"""

from __future__ import annotations

import threading

from apigate.core.errors import AsyncBusyError
from apigate.execution.session import LockKey, SessionState


class LockManager:
    """Owns the lock groups of one dispatcher across all sessions."""

    def __init__(self, owner: str):
        self._owner = owner

    def get_lock(self, session: SessionState, group: str) -> threading.Lock | None:
        """Return the session's lock for ``group``; ``None`` means no locking.

        The lock is created on first use and never removed until the
        session ends.
        """
        if not group:
            return None
        return session.get_or_create_lock(LockKey(self._owner, group))

    def try_acquire(self, session: SessionState, group: str) -> threading.Lock | None:
        """Acquire the group's lock without blocking.

        Returns:
            The acquired lock (caller must release it), or ``None`` when
            the group is empty

        Raises:
            AsyncBusyError: If another invocation currently holds the lock
        """
        lock = self.get_lock(session, group)
        if lock is not None and not lock.acquire(blocking=False):
            raise AsyncBusyError("Async task already running.").with_context(
                session_id=session.session_id,
                lock_group=group,
            )
        return lock

    def is_locked(self, session: SessionState, group: str) -> bool:
        """Check whether the group is currently held (without acquiring)."""
        lock = self.get_lock(session, group)
        return lock is not None and lock.locked()
