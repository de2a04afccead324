"""
GAD Backend — Request ID Middleware
====================================

What:  Assigns a correlation ID to each incoming request and echoes it back.
Why:   Every log line and error body of a request carries the same ID, so a
       support ticket quoting it leads straight to the server logs.
How:   Reuses the client's X-Request-ID header when present, otherwise
       generates a short UUID. Stored in a ContextVar (for loggers and
       exception handlers) and on request.state, and set on the response.
Who:   Applied to every request via Starlette middleware.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own value
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

REQUEST_ID_HEADER = "X-Request-ID"


def current_request_id(request: Request) -> str:
    """Request ID for `request`, falling back to the ContextVar."""
    return getattr(request.state, "request_id", None) or request_id_var.get("")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Middleware that assigns a unique ID to each request for tracing."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # Generated IDs are the first 8 hex chars of a UUID4
        rid = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
