"""
Dispatch router — the catch-all route in front of the dispatcher.

``GET|POST {prefix}/.../{class_id}/{method_id}``

The dispatcher runs in the thread pool.  For asynchronous operations it
returns as soon as the work is submitted, so the endpoint then waits on
the response adapter until the worker has written a result or an error
(bounded by ``async_timeout`` when configured).
"""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Request
from starlette.concurrency import run_in_threadpool
from starlette.responses import Response

from apigate.api.context import HttpRequestContext, HttpResponseContext
from apigate.api.deps import DispatcherDep, Sessions, Settings
from apigate.api.middleware.errors import problem_response
from apigate.api.routing import parse_path
from apigate.core.errors import MalformedRequestError
from apigate.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.api_route("/{path:path}", methods=["GET", "POST"], include_in_schema=False)
async def dispatch_request(
    path: str,
    request: Request,
    dispatcher: DispatcherDep,
    sessions: Sessions,
    settings: Settings,
) -> Response:
    """Route ``/<class_id>/<method_id>`` to the dispatcher."""
    context = await HttpRequestContext.from_request(request, sessions, settings.session_cookie)
    pending = HttpResponseContext()
    instance = str(request.url)

    target = parse_path("/" + path)
    if target is None:
        dispatcher.reject(pending, MalformedRequestError("Malformed request."))
    else:
        class_id, method_id = target
        await run_in_threadpool(dispatcher.dispatch, class_id, method_id, context, pending)
        try:
            await asyncio.wait_for(asyncio.shield(asyncio.wrap_future(pending.done)), settings.async_timeout)
        except TimeoutError:
            logger.warning("dispatch.timeout", handler=class_id, operation=method_id, timeout=settings.async_timeout)
            return _with_session_cookie(
                problem_response(status=504, title="Gateway Timeout", instance=instance),
                context,
                settings.session_cookie,
            )

    response = pending.to_response(debug=settings.debug, instance=instance)
    return _with_session_cookie(response, context, settings.session_cookie)


def _with_session_cookie(response: Response, context: HttpRequestContext, cookie: str) -> Response:
    if context.created_session is not None:
        response.set_cookie(
            cookie,
            context.created_session.session_id,
            httponly=True,
            samesite="lax",
        )
    return response
