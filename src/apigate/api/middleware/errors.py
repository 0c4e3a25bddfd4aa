"""
Error-handling middleware — RFC 7807 responses for everything that fails.
"""

from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse

from apigate.api.schemas import ProblemDetail
from apigate.core.logging import get_logger

logger = get_logger(__name__)


def problem_response(
    *,
    status: int,
    title: str,
    detail: str = "",
    instance: str = "",
) -> JSONResponse:
    """Build a RFC 7807 JSON error response."""
    body = ProblemDetail(
        title=title,
        status=status,
        detail=detail,
        instance=instance,
    )
    return JSONResponse(
        status_code=status,
        content=body.model_dump(),
        media_type="application/problem+json",
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions — returns 500 with ProblemDetail."""
    logger.error("http.unhandled_exception", path=request.url.path, error=str(exc), exc_info=exc)
    return problem_response(
        status=500,
        title="Internal Server Error",
        detail=str(exc) if request.app.state.settings.debug else "An unexpected error occurred.",
        instance=str(request.url),
    )
