"""
EstateHub Backend — Shared Schemas
====================================

What:  Base model configuration and response models used by every router.

Wire format:
    The web client speaks camelCase (`userEmail`, `createdAt`). Models declare
    snake_case attributes and serialize with camelCase aliases; requests are
    accepted in either spelling.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class APIModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class EmailRequest(APIModel):
    """Body of the user endpoints that only identify the caller."""

    email: EmailStr = Field(description="Email of the acting user")


class MessageResponse(APIModel):
    message: str = Field(description="Human-readable outcome")


class ErrorResponse(BaseModel):
    """
    Standardized error body for all API errors.

    Example:
        {
            "error": "duplicate_booking",
            "message": "This residency is already booked by you",
            "details": {"residency_id": "..."},
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
