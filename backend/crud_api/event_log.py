"""
Polystore CRUD API — Event Log (Observability Sink)
=====================================================

What:  The two entry points every route uses to record its outcome:
       info(message, request, payload) and error(message, request, error).
Why:   Access logs (middleware/logging.py) say that a request happened;
       event logs say what it did: which user was created, which product
       was not found, which S3 error code came back.
How:   One synchronous write per call to the `crud_api.events` logger. The
       request is reduced to {request_id, method, path, client_ip}; payloads
       go through FastAPI's jsonable_encoder; errors are normalized to
       {kind, type, message} so driver objects never end up in the log line.

Log line format:
    <message> | {"request": {...}, "payload": ...}
    <message> | {"request": {...}, "error": {"kind": ..., "type": ..., "message": ...}}

No buffering or batching. A payload that cannot be encoded is logged as
its repr; the sink never fails the request it is recording.
"""

import json
import logging
from typing import Any, Dict, Optional

from fastapi.encoders import jsonable_encoder
from starlette.requests import Request

from crud_api.exceptions import CrudApiError, ErrorKind
from crud_api.middleware.request_id import request_id_var


def request_context(request: Optional[Request]) -> Optional[Dict[str, Any]]:
    """Reduce a Starlette request to the fields worth logging."""
    if request is None:
        return None
    client_ip = getattr(request.client, "host", "unknown") if request.client else "unknown"
    return {
        "request_id": getattr(request.state, "request_id", None) or request_id_var.get(""),
        "method": request.method,
        "path": request.url.path,
        "client_ip": client_ip,
    }


def describe_error(error: Optional[BaseException]) -> Optional[Dict[str, Any]]:
    """Normalize any exception into {kind, type, message[, context]}."""
    if error is None:
        return None
    if isinstance(error, CrudApiError):
        described = {
            "kind": error.kind.value,
            "type": type(error).__name__,
            "message": error.message,
        }
        if error.context:
            described["context"] = error.context
        return described
    return {
        "kind": ErrorKind.BACKEND_FAILURE.value,
        "type": type(error).__name__,
        "message": str(error),
    }


class EventLog:
    """Request-outcome logger used by every route and exception handler."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("crud_api.events")

    def info(
        self,
        message: str,
        request: Optional[Request] = None,
        payload: Any = None,
    ) -> None:
        event: Dict[str, Any] = {"request": request_context(request)}
        if payload is not None:
            event["payload"] = payload
        self.logger.info("%s | %s", message, self._encode(event))

    def error(
        self,
        message: str,
        request: Optional[Request] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        event: Dict[str, Any] = {"request": request_context(request)}
        described = describe_error(error)
        if described is not None:
            event["error"] = described
        self.logger.error("%s | %s", message, self._encode(event))

    @staticmethod
    def _encode(event: Dict[str, Any]) -> str:
        try:
            return json.dumps(jsonable_encoder(event), default=str, ensure_ascii=False)
        except (TypeError, ValueError):
            return repr(event)


# Module-level instance shared by routes and exception handlers
event_log = EventLog()
