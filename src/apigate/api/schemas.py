"""
API schemas — RFC 7807 error envelope.

Successful dispatches return whatever the operation's result encodes
to; every failure (dispatch errors, redirects misconfigured, timeouts,
unhandled exceptions) returns a :class:`ProblemDetail`.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ProblemDetail(BaseModel):
    """RFC 7807 «Problem Details for HTTP APIs».

    ``detail`` stays empty for dispatch failures unless debug mode is
    on, so callers cannot distinguish error kinds.
    """

    type: str = Field(default="about:blank", description="Problem type URI")
    title: str = Field(description="Short summary of the problem")
    status: int = Field(description="HTTP status code")
    detail: str = Field(default="", description="Explanation of this occurrence")
    instance: str = Field(default="", description="URI of the request that failed")
