"""
EstateHub Backend — Custom Exception Hierarchy
================================================

What:  Application-specific exceptions raised by services.
How:   Each exception carries a message and an optional context dict. Global
       handlers registered in main.py map them to status codes and JSON bodies.

Exception Hierarchy:
    EstateHubError (base)
    ├── NotFoundError              → 404 Not Found
    ├── UniquenessViolationError   → 409 Conflict
    ├── DuplicateBookingError      → 409 Conflict
    ├── ConcurrentUpdateError      → 409 Conflict
    └── DatabaseError              → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class EstateHubError(Exception):
    """
    Base exception for all EstateHub application errors.

    Attributes:
        message:  User-facing error description
        context:  Extra debug info, logged and returned as `details` where safe
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class NotFoundError(EstateHubError):
    """
    A user, residency or booking does not exist.

    SQLAlchemy returns None for missing rows; services convert that into this
    exception so routes never deal with None.
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
            if resource_id:
                message = f"{resource} '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class UniquenessViolationError(EstateHubError):
    """A unique constraint rejected the write, e.g. same address for the same owner."""

    status_code = 409
    error_code = "uniqueness_violation"

    def __init__(
        self,
        message: str = "A record with these values already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DuplicateBookingError(EstateHubError):
    """The user already has a booking for this residency."""

    status_code = 409
    error_code = "duplicate_booking"

    def __init__(
        self,
        residency_id: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["residency_id"] = residency_id
        super().__init__(message="This residency is already booked by you", context=ctx)
        self.residency_id = residency_id


class ConcurrentUpdateError(EstateHubError):
    """
    Optimistic-lock retries were exhausted.

    Raised when another request kept modifying the same user record between
    our read and our version-checked write. The client may simply retry.
    """

    status_code = 409
    error_code = "concurrent_update"

    def __init__(
        self,
        attempts: int,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["attempts"] = attempts
        super().__init__(
            message="The record was modified concurrently. Please retry the request.",
            context=ctx,
        )
        self.attempts = attempts


class DatabaseError(EstateHubError):
    """
    Any other datastore failure.

    The message carries the driver's error text. Whether it reaches the client
    is decided by settings.expose_error_details in the global handler.
    """

    status_code = 500
    error_code = "database_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
