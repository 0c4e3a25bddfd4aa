"""Shared base settings for apigate.

Every surface (HTTP transport, CLI) needs the same handful of knobs:
bind address, debug mode, log level.  ``ApigateBaseSettings`` declares
them once so each surface only adds its own fields.

    - **Pydantic validation:** Type-checked at startup, not at dispatch
    - **Environment-driven:** Reads from env vars and .env files
    - **Extra ignore:** Unknown env vars don't cause startup failures

Examples:
    >>> from apigate.core.settings import ApigateBaseSettings
    >>> class WorkerSettings(ApigateBaseSettings):
    ...     model_config = {"env_prefix": "APIGATE_WORKER_"}
    ...     concurrency: int = 8
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ApigateBaseSettings(BaseSettings):
    """Common settings shared across apigate surfaces.

    Fields
    ──────
    host       : Bind address for the HTTP transport
    port       : Bind port for the HTTP transport
    debug      : Include error details in error responses
    log_level  : Structlog log level
    log_format : ``console`` or ``json``
    """

    model_config = SettingsConfigDict(
        env_prefix="APIGATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Network ──────────────────────────────────────────────────
    host: str = "127.0.0.1"
    port: int = Field(default=8080, ge=0, le=65535)

    # ── Observability ────────────────────────────────────────────
    debug: bool = False
    log_level: str = "INFO"
    log_format: str = "console"
