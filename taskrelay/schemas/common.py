"""
TaskRelay Backend — Shared Response Schemas
============================================

What:  Error and health response models used across all routes.
Why:   Clients need one error structure to parse, whatever failed.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.

    Fields:
        error: Machine-readable error code (e.g., "validation_error", "upstream_error")
        message: Human-readable description for display to users
        details: Optional extra context (failed field, upstream payload)
        request_id: Correlation ID for tracing this error in server logs

    Example:
        {
            "error": "upstream_error",
            "message": "todoist request failed with status 403",
            "details": {"service": "todoist", "status_code": 403, "upstream": "Forbidden"},
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """
    What:  Health check response.
    Who:   Returned by GET /health for monitoring and load balancer probes.

    Upstreams are not called: a health probe every few seconds must not spend
    task-service or OCR quota. Instead the response lists which integrations
    are missing credentials.
    """
    status: str = Field(description="Overall status: healthy or degraded")
    version: str = Field(description="Application version")
    missing_configuration: List[str] = Field(
        default_factory=list,
        description="Settings that must be provided for every route to work",
    )
    access_control: bool = Field(description="Whether /api routes require the internal secret")
    uptime_seconds: float = Field(description="Seconds since service started")


class PingResponse(BaseModel):
    message: str
