"""
Logging context management using contextvars.

Dispatch context (request, session, handler, operation) is attached to
every log entry without being passed around explicitly.  contextvars
are asyncio-safe; executors copy the current context into worker
threads so asynchronous operations log with the request that started
them.
"""

import uuid
from contextvars import ContextVar
from dataclasses import asdict, dataclass
from typing import Any

import structlog


def _generate_span_id() -> str:
    """Generate a short span ID (8 hex chars)."""
    return uuid.uuid4().hex[:8]


@dataclass
class LogContext:
    """
    Dispatch context attached to all log entries.

    Request identity:
        request_id: Transport-level request identifier
        session_id: Client session identifier

    Target:
        handler: Class identifier being dispatched to
        operation: Method identifier being dispatched to
        mode: "sync" or "async"

    Tracing (for nested timing blocks):
        span_id: Current span identifier
        parent_span_id: Parent span for nested steps
        step: Current step name
    """

    request_id: str | None = None
    session_id: str | None = None

    handler: str | None = None
    operation: str | None = None
    mode: str | None = None

    span_id: str | None = None
    parent_span_id: str | None = None
    step: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict."""
        return {k: v for k, v in asdict(self).items() if v is not None}

    def merge(self, **kwargs) -> "LogContext":
        """Create new context with merged values."""
        current = asdict(self)
        current.update({k: v for k, v in kwargs.items() if v is not None})
        return LogContext(**current)


_log_context: ContextVar[LogContext] = ContextVar("apigate_log_context")  # noqa: B039


def get_context() -> LogContext:
    """Get the current log context."""
    return _log_context.get(LogContext())


def set_context(
    request_id: str | None = None,
    session_id: str | None = None,
    handler: str | None = None,
    operation: str | None = None,
    mode: str | None = None,
) -> LogContext:
    """
    Set the current log context.

    This replaces the current context. Use bind_context() to add to existing.
    """
    ctx = LogContext(
        request_id=request_id,
        session_id=session_id,
        handler=handler,
        operation=operation,
        mode=mode,
    )
    _log_context.set(ctx)
    return ctx


def bind_context(**kwargs) -> LogContext:
    """Merge values into the current context and return it."""
    updated = get_context().merge(**kwargs)
    _log_context.set(updated)
    return updated


def clear_context() -> None:
    """Clear the current context (reset to empty)."""
    _log_context.set(LogContext())


class _ContextToken:
    """Token for restoring context after a scoped operation."""

    def __init__(self, token):
        self._token = token

    def restore(self):
        """Restore the previous context."""
        _log_context.reset(self._token)


def push_context(**kwargs) -> _ContextToken:
    """
    Push new context values, returning a token to restore later.

    Usage:
        token = push_context(step="bind")
        try:
            do_work()
        finally:
            token.restore()
    """
    updated = get_context().merge(**kwargs)
    token = _log_context.set(updated)
    return _ContextToken(token)


def add_context_processor(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Structlog processor that adds the dispatch context to every entry."""
    for key, value in get_context().to_dict().items():
        if key not in event_dict:
            event_dict[key] = value
    return event_dict


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger (typically ``get_logger(__name__)``)."""
    return structlog.get_logger(name)
