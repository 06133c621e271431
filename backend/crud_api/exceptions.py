"""
Polystore CRUD API — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for the three error kinds a handler
       can produce.
Why:   Each backend driver raises its own exception types (PyMongoError,
       SQLAlchemyError, botocore ClientError). Services translate them into
       this hierarchy so driver-specific error shapes never reach the log
       payload or the API response.
How:   Each exception carries a message, an ErrorKind, an HTTP status code
       and an optional context dict. Global exception handlers (registered
       in main.py) catch these and return structured JSON error responses.
Who:   Raised by services; caught by global handlers.

Exception Hierarchy:
    CrudApiError (base)
    ├── NotFoundError            → 404 Not Found
    ├── ValidationError          → 400 Bad Request
    └── BackendError             → 500 Internal Server Error
        ├── DocumentStoreError   (MongoDB)
        ├── DatabaseError        (MySQL)
        └── ObjectStorageError   (S3)
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Stable error classification used in logs and response bodies."""

    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    BACKEND_FAILURE = "backend_failure"


class CrudApiError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Normalized details (error type, driver error code); never
                  the raw driver exception
    """

    kind: ErrorKind = ErrorKind.BACKEND_FAILURE
    status_code: int = 500

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = dict(context or {})


class NotFoundError(CrudApiError):
    """
    Raised when a requested entity does not exist.

    When:    User id, product id or object key absent from its backend.
    HTTP:    404 Not Found

    MongoDB and SQLAlchemy report a missing record as None (or a zero
    affected-row count) rather than an exception; services convert that into
    NotFoundError. For S3 the HeadObject "not found" code is converted.
    """

    kind = ErrorKind.NOT_FOUND
    status_code = 404

    def __init__(
        self,
        resource: str,
        resource_id: Any = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        details = {"resource": resource, **(context or {})}
        if resource_id is None:
            message = f"{resource.capitalize()} not found"
        else:
            details["resource_id"] = str(resource_id)
            message = f"{resource.capitalize()} '{resource_id}' not found"
        super().__init__(message, details)
        self.resource = resource


class ValidationError(CrudApiError):
    """
    Raised when client input is unusable and the client can fix it.

    When:    e.g. an upload part without a filename.
    HTTP:    400 Bad Request

    Body schema errors (malformed JSON, missing fields) never reach this
    class: FastAPI raises RequestValidationError for those, which main.py
    answers with 422.
    """

    kind = ErrorKind.VALIDATION
    status_code = 400

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        details = dict(context or {})
        if field is not None:
            details["field"] = field
        super().__init__(message, details)
        self.field = field


class BackendError(CrudApiError):
    """
    Raised when a backend call fails: connectivity loss, query error,
    storage-service error.

    HTTP:    500 Internal Server Error
    No retry and no fallback: a backend outage surfaces as per-request 500s.
    """

    kind = ErrorKind.BACKEND_FAILURE
    status_code = 500

    backend: str = "backend"

    def __init__(
        self,
        message: str = "A backend error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, {"backend": self.backend, **(context or {})})

    @classmethod
    def from_exception(
        cls,
        message: str,
        exc: BaseException,
        code: Optional[str] = None,
    ) -> "BackendError":
        """Builds the error with a normalized context from a driver exception."""
        context: Dict[str, Any] = {"error_type": type(exc).__name__}
        if code:
            context["code"] = code
        return cls(message=message, context=context)


class DocumentStoreError(BackendError):
    """MongoDB operation failed."""

    backend = "mongodb"


class DatabaseError(BackendError):
    """
    MySQL operation failed.

    The response carries only the exception type name; the SQL text and
    driver message stay in server-side logs.
    """

    backend = "mysql"


class ObjectStorageError(BackendError):
    """S3 operation failed. `code` holds the AWS error code when present."""

    backend = "s3"
