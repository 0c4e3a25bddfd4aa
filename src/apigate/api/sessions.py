"""Session registry — the HTTP transport's store of ``SessionState``.

Sessions are identified by an opaque token carried in a cookie.  A
session is created on first demand, touched on every access and
dropped after ``idle_timeout`` seconds without one.  Dropping a session
invalidates it, releasing its handler instances and lock groups.

Example::

    sessions = SessionRegistry(idle_timeout=1800)
    session, created = sessions.get_or_create(request.cookies.get("apigate_session"))
"""

from __future__ import annotations

import secrets
import threading

from apigate.core.logging import get_logger
from apigate.execution.session import SessionState

logger = get_logger(__name__)


class SessionRegistry:
    """Thread-safe mapping of session id → ``SessionState``."""

    def __init__(self, idle_timeout: float = 1800.0):
        self.idle_timeout = idle_timeout
        self._sessions: dict[str, SessionState] = {}
        self._lock = threading.Lock()

    def get(self, session_id: str | None) -> SessionState | None:
        """Return the live session for ``session_id``, or ``None``.

        An expired session is invalidated and reported as absent.
        """
        if not session_id:
            return None
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            if session.idle_seconds() > self.idle_timeout:
                self._drop(session)
                return None
            session.touch()
            return session

    def get_or_create(self, session_id: str | None = None) -> tuple[SessionState, bool]:
        """Return ``(session, created)``, creating a fresh session if needed.

        A new session always gets a freshly generated id; client-chosen
        ids are never adopted.
        """
        session = self.get(session_id)
        if session is not None:
            return session, False

        session = SessionState(secrets.token_urlsafe(24))
        with self._lock:
            self._sessions[session.session_id] = session
        logger.info("session.created", session_id=session.session_id)
        return session, True

    def invalidate(self, session_id: str) -> bool:
        """Remove a session and everything it owns. Returns False if unknown."""
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.invalidate()
        return True

    def purge_expired(self) -> int:
        """Drop every session idle longer than ``idle_timeout``."""
        with self._lock:
            expired = [s for s in self._sessions.values() if s.idle_seconds() > self.idle_timeout]
            for session in expired:
                self._drop(session)
        return len(expired)

    def _drop(self, session: SessionState) -> None:
        # Caller holds self._lock
        self._sessions.pop(session.session_id, None)
        session.invalidate()
        logger.info("session.expired", session_id=session.session_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions
