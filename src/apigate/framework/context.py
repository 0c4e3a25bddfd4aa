"""Request and response contracts between the host and the dispatcher.

The dispatcher never sees a transport.  It reads named request values
and the session through ``RequestContext`` and writes results or errors
through ``ResponseContext``.  Operations can also declare either type
as a contextual parameter to receive the live objects.

``BufferedResponse`` and ``SimpleRequest`` are complete in-memory
implementations: the HTTP adapter builds on the first, and embedders
or tests can use both directly.
"""

from __future__ import annotations

import threading
import uuid
from abc import ABC, abstractmethod
from collections.abc import Mapping
from concurrent.futures import Future

from apigate.execution.session import SessionState


class RequestContext(ABC):
    """Read access to one inbound request."""

    method: str = "GET"
    request_id: str | None = None

    @abstractmethod
    def get_parameter(self, name: str) -> str | None:
        """Return the named request value as text, or None if absent."""

    @abstractmethod
    def get_session(self) -> SessionState:
        """Return the client's session, creating it if needed."""


class ResponseContext(ABC):
    """Write access to the response of one request."""

    @abstractmethod
    def write(self, body: bytes, media_type: str = "application/json") -> None:
        """Append ``body`` to the response."""

    @abstractmethod
    def send_error(self, status: int, message: str | None = None) -> None:
        """Replace the response with an HTTP-level error."""

    def close(self) -> None:  # noqa: B027
        """Signal that no further writes will happen."""


class SimpleRequest(RequestContext):
    """Request backed by a plain mapping and a given session."""

    def __init__(
        self,
        params: Mapping[str, str] | None = None,
        session: SessionState | None = None,
        *,
        method: str = "GET",
        request_id: str | None = None,
    ):
        self.params = dict(params or {})
        self.method = method
        self.request_id = request_id
        self._session = session
        self._session_lock = threading.Lock()

    def get_parameter(self, name: str) -> str | None:
        return self.params.get(name)

    def get_session(self) -> SessionState:
        with self._session_lock:
            if self._session is None:
                self._session = SessionState(uuid.uuid4().hex)
            return self._session


class BufferedResponse(ResponseContext):
    """Response collected in memory, completed by ``close()``.

    ``done`` resolves once the dispatcher is finished with the response,
    which for asynchronous operations happens on a worker thread after
    ``dispatch`` has already returned.
    """

    def __init__(self) -> None:
        self.status = 200
        self.media_type = "application/json"
        self.error_message: str | None = None
        self.done: Future = Future()
        self._chunks: list[bytes] = []
        self._lock = threading.Lock()

    def write(self, body: bytes, media_type: str = "application/json") -> None:
        with self._lock:
            if self.done.done():
                raise RuntimeError("Response already closed")
            self._chunks.append(body)
            self.media_type = media_type

    def send_error(self, status: int, message: str | None = None) -> None:
        with self._lock:
            if self.done.done():
                raise RuntimeError("Response already closed")
            self._chunks.clear()
            self.status = status
            self.error_message = message

    def close(self) -> None:
        with self._lock:
            if not self.done.done():
                self.done.set_result(self)

    @property
    def body(self) -> bytes:
        with self._lock:
            return b"".join(self._chunks)

    @property
    def is_error(self) -> bool:
        return self.status >= 400

    def wait(self, timeout: float | None = None) -> BufferedResponse:
        """Block until closed. Raises ``TimeoutError`` on timeout."""
        return self.done.result(timeout=timeout)
