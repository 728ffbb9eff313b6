"""
Prolink AI - Shared API Schemas
=================================

Error, health and language responses used by the HTTP layer.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Body returned by the exception handlers.

    Capability failures do not use this; they come back as an envelope with
    success=false. This is for failures outside the orchestrators (bad
    request bodies, health checks, unexpected errors).
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    completion_provider: str = Field(description="Configured completion provider name")
    provider_status: str = Field(description="Completion provider status: available, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")


class LanguagesResponse(BaseModel):
    supported_languages: List[str]
    default_language: str
