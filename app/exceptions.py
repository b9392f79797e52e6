# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Every error response has the shape {"error": "<message>", ...}.
# =============================================================================

import logging
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.models.contact import DeliveryErrorKind

logger = logging.getLogger(__name__)


class ContactRelayException(Exception):
    """
    Base exception for the contact relay.

    All custom exceptions inherit from this class. Every one of them ends
    the request; nothing is retried.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result: dict[str, Any] = {"error": self.message}
        result.update(self.details)
        return result


# =============================================================================
# Validation Exceptions (400)
# =============================================================================

class SubmissionValidationError(ContactRelayException):
    """Base for problems with the submitted form."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message=message, status_code=400, details=details)


class MissingFieldsError(SubmissionValidationError):
    """Raised when name, email or message is absent or empty."""

    def __init__(self, received: dict[str, bool]):
        self.missing = [field for field, present in received.items() if not present]
        super().__init__(
            message="All fields are required",
            details={"received": received, "missing": self.missing},
        )


class InvalidEmailError(SubmissionValidationError):
    """Raised when the email does not look like local@domain.tld."""

    def __init__(self):
        super().__init__(message="Invalid email format")


class InvalidRequestBodyError(SubmissionValidationError):
    """Raised when a JSON request body is malformed or not an object."""

    def __init__(self):
        super().__init__(message="Invalid request body")


# =============================================================================
# Server Exceptions (500)
# =============================================================================

class ConfigurationError(ContactRelayException):
    """Raised when the mail credentials are not configured."""

    def __init__(self):
        super().__init__(
            message="Server configuration error - email credentials not configured",
            status_code=500,
        )


class DeliveryError(ContactRelayException):
    """
    Raised when the mail transport could not deliver the message.

    The raw transport error is only included in the response body when
    expose_detail is set (development mode).
    """

    def __init__(
        self,
        kind: DeliveryErrorKind,
        detail: str | None = None,
        expose_detail: bool = False,
    ):
        self.kind = kind
        self.detail = detail
        super().__init__(
            message=kind.user_message,
            status_code=500,
            details={"details": detail} if expose_detail and detail is not None else None,
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def contact_relay_exception_handler(
    request: Request,
    exc: ContactRelayException
) -> JSONResponse:
    """Convert ContactRelayException to JSON response."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def not_found_exception_handler(
    request: Request,
    exc: StarletteHTTPException
) -> JSONResponse:
    """
    Handle routing errors.

    Unknown paths and unsupported methods on known paths are both reported
    as a missing endpoint.
    """
    if exc.status_code in (404, 405):
        return JSONResponse(
            status_code=404,
            content={"error": "Endpoint not found"}
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Last-resort boundary for anything not handled above."""
    logger.exception(f"Unhandled error: {exc}")
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error"}
    )
