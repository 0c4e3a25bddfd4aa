"""HTTP adapters for the dispatcher's request and response contracts.

``HttpRequestContext`` snapshots the request values up front, because
the dispatcher reads them from a worker thread after the endpoint
coroutine has moved on.  Query parameters win over form fields, and
the first of repeated values is the one kept.
The session is only looked up, or created, when the dispatcher asks
for it; the endpoint then sets the cookie for a new one.
"""

from __future__ import annotations

import threading
from http import HTTPStatus

from starlette.requests import Request
from starlette.responses import Response

from apigate.api.middleware.errors import problem_response
from apigate.api.sessions import SessionRegistry
from apigate.execution.session import SessionState
from apigate.framework.context import BufferedResponse, RequestContext


class HttpRequestContext(RequestContext):
    """One HTTP request as seen by the dispatcher."""

    def __init__(
        self,
        params: dict[str, str],
        sessions: SessionRegistry,
        *,
        session_id: str | None = None,
        method: str = "GET",
        request_id: str | None = None,
    ):
        self.params = params
        self.method = method
        self.request_id = request_id
        self.created_session: SessionState | None = None
        self._sessions = sessions
        self._session_id = session_id
        self._session: SessionState | None = None
        self._lock = threading.Lock()

    @classmethod
    async def from_request(cls, request: Request, sessions: SessionRegistry, cookie: str) -> HttpRequestContext:
        params: dict[str, str] = {}
        for key, value in request.query_params.multi_items():
            params.setdefault(key, value)
        if request.method == "POST":
            form = await request.form()
            for key, value in form.multi_items():
                if isinstance(value, str):
                    params.setdefault(key, value)
        return cls(
            params,
            sessions,
            session_id=request.cookies.get(cookie),
            method=request.method,
            request_id=getattr(request.state, "request_id", None),
        )

    def get_parameter(self, name: str) -> str | None:
        return self.params.get(name)

    def get_session(self) -> SessionState:
        with self._lock:
            if self._session is None:
                self._session, created = self._sessions.get_or_create(self._session_id)
                if created:
                    self.created_session = self._session
            return self._session


class HttpResponseContext(BufferedResponse):
    """Buffered response rendered to a Starlette response once done."""

    def to_response(self, *, debug: bool = False, instance: str = "") -> Response:
        if self.is_error:
            return problem_response(
                status=self.status,
                title=_phrase(self.status),
                detail=(self.error_message or "") if debug else "",
                instance=instance,
            )
        return Response(content=self.body, media_type=self.media_type)


def _phrase(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return "Error"
