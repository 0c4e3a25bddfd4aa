"""
FastAPI application factory.

``create_app()`` wires middleware, the dispatch router, error handlers
and lifespan events around one :class:`~apigate.framework.Dispatcher`.

The app factory is the single composition root: the rest of the
package never touches ``FastAPI`` directly.

Example::

    api = Dispatcher({"calc": Calculator})
    app = create_app(api)
    # uvicorn.run(app)
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from apigate.api.deps import get_settings
from apigate.api.middleware.errors import unhandled_exception_handler
from apigate.api.middleware.redirect import RedirectMiddleware
from apigate.api.middleware.request_id import RequestIDMiddleware
from apigate.api.sessions import SessionRegistry
from apigate.api.settings import ApigateAPISettings
from apigate.core.logging import configure_logging, get_logger
from apigate.framework.dispatcher import Dispatcher

log = get_logger("apigate.api")

# Upper bound between two sweeps for idle sessions
_PURGE_INTERVAL = 60.0


async def _purge_sessions(sessions: SessionRegistry) -> None:
    interval = min(sessions.idle_timeout, _PURGE_INTERVAL)
    while True:
        await asyncio.sleep(interval)
        purged = sessions.purge_expired()
        if purged:
            log.debug("session.purged", count=purged)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan — session sweeping and executor shutdown."""
    dispatcher: Dispatcher = app.state.dispatcher
    log.info("apigate API starting", version=app.version, dispatcher=dispatcher.name)

    purger = asyncio.create_task(_purge_sessions(app.state.sessions))
    try:
        yield
    finally:
        purger.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await purger
        dispatcher.close(wait=False)
        log.info("apigate API shutting down")


def create_app(
    dispatcher: Dispatcher,
    *,
    settings: ApigateAPISettings | None = None,
) -> FastAPI:
    """Build and return a fully-configured FastAPI application.

    Parameters
    ----------
    dispatcher : Dispatcher
        The dispatcher every request is routed to.
    settings : ApigateAPISettings | None
        Override settings (useful for testing).  When ``None`` the cached
        singleton from :func:`get_settings` is used.
    """

    settings = settings or get_settings()
    configure_logging(level=settings.log_level, format=settings.log_format)

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    # Stash shared state for dependencies and middleware
    app.state.settings = settings
    app.state.dispatcher = dispatcher
    app.state.sessions = SessionRegistry(idle_timeout=settings.session_idle_timeout)

    # Override DI so endpoints use the provided settings
    app.dependency_overrides[get_settings] = lambda: settings

    # ── Middleware (outermost → innermost) ────────────────────────────
    if settings.redirects:
        app.add_middleware(RedirectMiddleware, routes=settings.redirects)
    app.add_middleware(RequestIDMiddleware)

    # ── Exception handlers ───────────────────────────────────────────
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # ── Routers ──────────────────────────────────────────────────────
    from apigate.api.routers import dispatch

    app.include_router(dispatch.router, prefix=settings.api_prefix)

    return app
