"""
Registrar Backend: Shared Response Schemas
===========================================

What:  Error and health payloads shared by every router.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "not_found",
            "message": "Student with ID '4f0c...' was not found",
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error kind")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    errors: Optional[List[str]] = Field(
        default=None,
        description="Per-field validation messages ('field: problem')",
    )
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and load balancer health checks."""
    status: str = Field(description="Overall service status: healthy or unhealthy")
    version: str = Field(description="Application version")
    store_backend: str = Field(description="Active document store: sql or memory")
    database: str = Field(description="Store connectivity: connected or disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
