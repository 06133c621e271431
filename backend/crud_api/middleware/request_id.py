"""
Polystore CRUD API — Request ID Middleware
============================================

What:  Gives every request a short correlation ID and returns it in the
       X-Request-ID response header.
Why:   Access log lines, event log lines and error bodies of one request all
       carry the same ID.
How:   A usable client-supplied X-Request-ID is kept, otherwise one is
       generated. The ID lives in a ContextVar (for loggers) and in
       request.state, which is shared with the catch-all 500 handler that
       runs outside this middleware.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 64

# Coroutine-local: concurrent requests on the same thread keep separate IDs
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    # 8 hex chars are enough for correlation and readable in logs
    return uuid.uuid4().hex[:8]


def resolve_request_id(request: Request) -> str:
    """Client ID when present and short enough to log, otherwise a new one."""
    supplied = request.headers.get(REQUEST_ID_HEADER, "").strip()
    if supplied and len(supplied) <= MAX_REQUEST_ID_LENGTH:
        return supplied
    return new_request_id()


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tags each request and its response with a correlation ID."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = resolve_request_id(request)
        request.state.request_id = request_id
        request_id_var.set(request_id)

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
