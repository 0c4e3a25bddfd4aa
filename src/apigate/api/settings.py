"""
API-specific settings.

Extends :class:`~apigate.core.settings.ApigateBaseSettings` with the
knobs of the HTTP transport: URL prefix, session cookie and idle
timeout, async completion bound, and unconditional redirects.

All values can be overridden via environment variables prefixed with
``APIGATE_`` (``APIGATE_API_PREFIX``, ``APIGATE_ASYNC_TIMEOUT``, ...).
"""

from __future__ import annotations

from typing import Annotated

from pydantic import Field

from apigate.core.settings import ApigateBaseSettings


class ApigateAPISettings(ApigateBaseSettings):
    """Settings for the apigate HTTP transport.

    Order of precedence (highest → lowest):
        1. Environment variables
        2. ``.env`` file
        3. Defaults below
    """

    # ── API ──────────────────────────────────────────────────────────────
    api_prefix: str = Field(default="", description="URL prefix of the dispatch route")
    api_title: str = Field(default="apigate", description="OpenAPI title")
    api_version: str = Field(default="0.1.0", description="OpenAPI version string")

    # ── Sessions ─────────────────────────────────────────────────────────
    session_cookie: str = Field(default="apigate_session", description="Session cookie name")
    session_idle_timeout: float = Field(
        default=1800.0, gt=0, description="Seconds of inactivity before a session expires"
    )

    # ── Async completion ─────────────────────────────────────────────────
    async_timeout: Annotated[float, Field(gt=0)] | None = Field(
        default=None,
        description="Seconds to wait for an async operation before answering 504 (None = unbounded)",
    )

    # ── Redirects ────────────────────────────────────────────────────────
    redirects: dict[str, str] = Field(
        default_factory=dict,
        description="Path → target of unconditional 302 redirects",
    )
