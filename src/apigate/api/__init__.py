"""apigate HTTP transport (FastAPI).

    app.py         create_app() composition root
    settings.py    ApigateAPISettings
    sessions.py    Cookie-keyed SessionRegistry
    context.py     HTTP request/response adapters
    routing.py     Path → (class_id, method_id)
    routers/       Catch-all dispatch route
    middleware/    Request ids, redirects, RFC 7807 errors
"""

from apigate.api.app import create_app
from apigate.api.sessions import SessionRegistry
from apigate.api.settings import ApigateAPISettings

__all__ = ["ApigateAPISettings", "SessionRegistry", "create_app"]
