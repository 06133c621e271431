"""
Polystore CRUD API — Shared Response Schemas
==============================================

What:  Response models used by more than one resource family.
"""

from typing import Optional

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """Plain acknowledgement (updates, deletes, schema init)."""

    message: str = Field(description="Human-readable result")


class ConnectionStatus(BaseModel):
    """Result of a /testar-conexao connection test."""

    status: str = Field(default="connected", description="connected")
    message: str
    user_found: Optional[bool] = Field(
        default=None,
        description="MongoDB connection test only: whether at least one user exists",
    )


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.
    Why:   Clients need a consistent structure to parse errors programmatically.

    Fields:
        error: Error kind (not_found, validation, backend_failure,
               internal_server_error)
        message: Human-readable description
        details: Normalized context (error type, driver error code, resource id)
        request_id: Correlation ID for tracing this error in server logs

    Example:
        {
            "error": "not_found",
            "message": "Product '42' not found",
            "details": {"resource": "product", "resource_id": "42"},
            "request_id": "1f2e3d4c"
        }
    """
    error: str = Field(description="Machine-readable error kind")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")
