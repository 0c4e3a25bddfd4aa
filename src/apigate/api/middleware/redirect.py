"""Redirect middleware — unconditional 302s for configured paths.

Example::

    app.add_middleware(RedirectMiddleware, routes={"/": "/static/index.html"})
"""

from __future__ import annotations

from collections.abc import Mapping

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response
from starlette.types import ASGIApp

from apigate.core.errors import MissingConfigError


class RedirectMiddleware(BaseHTTPMiddleware):
    """Answer requests to a configured path with a redirect to its target.

    Raises:
        MissingConfigError: If any configured target is empty
    """

    def __init__(self, app: ASGIApp, routes: Mapping[str, str]):
        super().__init__(app)
        for path, target in routes.items():
            if not target:
                raise MissingConfigError(f"redirects[{path}]", f"Redirect target for {path!r} is not configured")
        self.routes = dict(routes)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        target = self.routes.get(request.url.path)
        if target is not None:
            return RedirectResponse(target, status_code=302)
        return await call_next(request)
