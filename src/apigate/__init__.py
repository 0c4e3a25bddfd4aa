"""
apigate — session-scoped method dispatch over HTTP.

Handler classes expose operations with ``@api_method``; a ``Dispatcher``
routes ``(class_id, method_id)`` requests to them, enforcing per-session
access levels, binding request values to typed parameters, keeping one
handler instance per session and optionally running operations off the
request thread under a non-blocking lock group.

Quick start::

    from typing import Annotated
    from apigate import Dispatcher, Param, api_method
    from apigate.api import create_app

    class Calculator:
        @api_method(access_level=0)
        def add(self, a: Annotated[int, Param("a")], b: Annotated[int, Param("b")]) -> int:
            return a + b

    app = create_app(Dispatcher({"calc": Calculator}))
"""

from apigate.execution.session import NO_ACCESS, SessionState
from apigate.framework import (
    URI,
    URL,
    BufferedResponse,
    Dispatcher,
    Param,
    RequestContext,
    ResponseContext,
    SimpleRequest,
    ValueConverter,
    api_method,
    describe_handler,
)

__version__ = "0.1.0"

__all__ = [
    "BufferedResponse",
    "Dispatcher",
    "NO_ACCESS",
    "Param",
    "RequestContext",
    "ResponseContext",
    "SessionState",
    "SimpleRequest",
    "URI",
    "URL",
    "ValueConverter",
    "api_method",
    "describe_handler",
    "__version__",
]
