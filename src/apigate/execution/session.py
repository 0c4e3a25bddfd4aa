"""Session state — the typed per-client record the dispatcher writes to.

WHY
───
The dispatcher keeps three kinds of per-session state: the access
level, one handler instance per handler type, and one lock per lock
group.  All three are scoped by the identity of the dispatcher that
owns them, so two dispatchers sharing a session never collide.  Keys
are typed (``InstanceKey`` / ``LockKey``), not formatted strings.

ARCHITECTURE
────────────
::

    SessionState(session_id)
      ├── access levels   owner          → int   (default -1)
      ├── instances       InstanceKey    → handler instance
      ├── locks           LockKey        → threading.Lock
      └── attributes      str            → any   (free-form, for handlers)

Everything lives as long as the session and is created on first
demand.  Two concurrent first invocations never build two instances
or two locks.  An instance is built under a lock of its own key, so a
slow constructor does not hold up the rest of the session.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

NO_ACCESS = -1


@dataclass(frozen=True)
class InstanceKey:
    """Key of a session-scoped handler instance."""

    owner: str
    handler: type


@dataclass(frozen=True)
class LockKey:
    """Key of a session-scoped lock group."""

    owner: str
    group: str


class SessionState:
    """State owned by one client session.

    Thread-safe: several in-flight requests of the same session may
    read and write concurrently.
    """

    def __init__(self, session_id: str):
        self.session_id = session_id
        self.created_at = time.monotonic()
        self.last_accessed = self.created_at
        self._mutex = threading.RLock()
        self._access_levels: dict[str, int] = {}
        self._instances: dict[InstanceKey, Any] = {}
        self._creating: dict[InstanceKey, threading.Lock] = {}
        self._locks: dict[LockKey, threading.Lock] = {}
        self._attributes: dict[str, Any] = {}
        self._valid = True

    # ── Access level ─────────────────────────────────────────────

    def get_access_level(self, owner: str) -> int:
        with self._mutex:
            return self._access_levels.get(owner, NO_ACCESS)

    def set_access_level(self, owner: str, level: int) -> None:
        with self._mutex:
            self._access_levels[owner] = level

    # ── Handler instances ────────────────────────────────────────

    def get_instance(self, key: InstanceKey) -> Any | None:
        with self._mutex:
            return self._instances.get(key)

    def get_or_create_instance(self, key: InstanceKey, factory: Callable[[], Any]) -> Any:
        """Return the instance under ``key``, building it with ``factory`` once."""
        with self._mutex:
            instance = self._instances.get(key)
            if instance is not None:
                return instance
            creating = self._creating.setdefault(key, threading.Lock())

        with creating:
            with self._mutex:
                instance = self._instances.get(key)
            if instance is not None:
                return instance
            instance = factory()
            with self._mutex:
                self._instances[key] = instance
                self._creating.pop(key, None)
            return instance

    # ── Locks ────────────────────────────────────────────────────

    def get_or_create_lock(self, key: LockKey) -> threading.Lock:
        with self._mutex:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    # ── Free-form attributes ─────────────────────────────────────

    def get_attribute(self, name: str, default: Any = None) -> Any:
        with self._mutex:
            return self._attributes.get(name, default)

    def set_attribute(self, name: str, value: Any) -> None:
        with self._mutex:
            self._attributes[name] = value

    def remove_attribute(self, name: str) -> None:
        with self._mutex:
            self._attributes.pop(name, None)

    # ── Lifecycle ────────────────────────────────────────────────

    def touch(self) -> None:
        """Record an access (used for idle expiry)."""
        self.last_accessed = time.monotonic()

    def idle_seconds(self) -> float:
        return time.monotonic() - self.last_accessed

    @property
    def is_valid(self) -> bool:
        return self._valid

    def invalidate(self) -> None:
        """Drop everything the session owns."""
        with self._mutex:
            self._valid = False
            self._access_levels.clear()
            self._instances.clear()
            self._creating.clear()
            self._locks.clear()
            self._attributes.clear()

    def __repr__(self) -> str:
        return f"SessionState(session_id={self.session_id!r})"
