"""HTTP middleware: request ids, redirects, error rendering."""

from apigate.api.middleware.errors import problem_response, unhandled_exception_handler
from apigate.api.middleware.redirect import RedirectMiddleware
from apigate.api.middleware.request_id import RequestIDMiddleware

__all__ = [
    "RedirectMiddleware",
    "RequestIDMiddleware",
    "problem_response",
    "unhandled_exception_handler",
]
