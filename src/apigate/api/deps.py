"""
FastAPI dependency injection — settings, dispatcher and sessions.

The dispatcher and session registry are created by :func:`create_app`
and kept on ``app.state``; these dependencies hand them to endpoints.

Usage in routers::

    from apigate.api.deps import DispatcherDep, Sessions, Settings

    @router.get("/things")
    def list_things(dispatcher: DispatcherDep, settings: Settings):
        ...
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request

from apigate.api.sessions import SessionRegistry
from apigate.api.settings import ApigateAPISettings
from apigate.framework.dispatcher import Dispatcher

# ── Settings (singleton) ─────────────────────────────────────────────────


@lru_cache(maxsize=1)
def get_settings() -> ApigateAPISettings:
    """Cached settings — loaded once per process."""
    return ApigateAPISettings()


# ── Application state ────────────────────────────────────────────────────


def get_dispatcher(request: Request) -> Dispatcher:
    return request.app.state.dispatcher


def get_sessions(request: Request) -> SessionRegistry:
    return request.app.state.sessions


# ── Convenience type aliases ─────────────────────────────────────────────

Settings = Annotated[ApigateAPISettings, Depends(get_settings)]
DispatcherDep = Annotated[Dispatcher, Depends(get_dispatcher)]
Sessions = Annotated[SessionRegistry, Depends(get_sessions)]
