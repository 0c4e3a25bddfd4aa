"""
apigate logging - structured, dispatch-aware logging.

Usage:
    from apigate.core.logging import configure_logging, get_logger, log_step, set_context

    configure_logging()
    log = get_logger(__name__)

    set_context(request_id="abc-123", handler="calc", operation="add")
    with log_step("operation.invoke"):
        invoke()
"""

from apigate.core.logging.config import configure_logging, is_configured
from apigate.core.logging.context import (
    LogContext,
    bind_context,
    clear_context,
    get_context,
    get_logger,
    push_context,
    set_context,
)
from apigate.core.logging.timing import TimingResult, log_step, timed_block

__all__ = [
    "configure_logging",
    "is_configured",
    "get_logger",
    "set_context",
    "clear_context",
    "get_context",
    "bind_context",
    "push_context",
    "LogContext",
    "log_step",
    "timed_block",
    "TimingResult",
]
