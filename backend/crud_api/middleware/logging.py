"""
Polystore CRUD API — Request Logging Middleware
=================================================

What:  One access log line per HTTP request: method, path, status, duration.
Why:   Complements the event log (crud_api.event_log), which records what a
       handler did; this records that the request happened and how long it
       took.
How:   Measures time around call_next and logs at a level derived from the
       status code.

What we log vs what we DON'T log:
    ✅ Log: method, path, status, duration, IP, request ID
    ❌ Don't log: request bodies or uploaded file contents
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from crud_api.middleware.request_id import request_id_var

logger = logging.getLogger("crud_api.access")

# Documentation endpoints are requested on every page load of the UI
QUIET_PATHS = {"/docs", "/redoc", "/openapi.json"}


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs method, path, status code and duration of each request.

    Uploads also report their declared Content-Length, so a slow
    POST /buckets/{bucketName}/upload can be told apart from a slow S3.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

        fields = {
            "request_id": request_id_var.get(""),
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "duration_ms": elapsed_ms,
            "client_ip": request.client.host if request.client else "unknown",
        }
        size = request.headers.get("content-length")
        suffix = f" ({size} bytes in)" if size and request.method in ("POST", "PUT") else ""

        logger.log(
            level_for_status(response.status_code),
            "%s %s %d %.1fms [%s] from %s%s",
            fields["method"],
            fields["path"],
            fields["status"],
            elapsed_ms,
            fields["request_id"],
            fields["client_ip"],
            suffix,
            extra=fields,
        )
        return response
