# =============================================================================
# core/models/contact.py - Contact Form Schemas
# =============================================================================
# These models define the contract for the contact relay:
# - Submission: A validated contact form entry (name, email, message)
# - DeliveryResult: Outcome of one attempt to hand a message to the provider
# - DeliveryErrorKind: Categories of transport failure
# - ContactResponse: Success body of POST /send-message
#
# Nothing here is persisted. A Submission lives for a single request.
# =============================================================================

from enum import Enum

from pydantic import BaseModel, Field


class DeliveryErrorKind(str, Enum):
    """
    Categories of mail transport failure.

    Each category maps to its own user-facing message so the caller can tell
    a credentials problem from a network problem.
    """
    AUTH = "auth"
    HOST_NOT_FOUND = "host_not_found"
    CONNECTION = "connection"
    UNKNOWN = "unknown"

    @property
    def user_message(self) -> str:
        return DELIVERY_ERROR_MESSAGES[self]


DELIVERY_ERROR_MESSAGES: dict[DeliveryErrorKind, str] = {
    DeliveryErrorKind.AUTH: "Email authentication failed - check your Gmail app password",
    DeliveryErrorKind.HOST_NOT_FOUND: "Network error - unable to connect to email service",
    DeliveryErrorKind.CONNECTION: "Connection error - please try again later",
    DeliveryErrorKind.UNKNOWN: "Failed to send message",
}


class Submission(BaseModel):
    """
    A contact form entry that passed validation.

    Example:
        {
            "name": "Ada Lovelace",
            "email": "ada@example.com",
            "message": "Loved the portfolio!"
        }
    """

    name: str = Field(..., min_length=1, description="Name of the visitor")
    email: str = Field(..., min_length=3, description="Address replies should go to")
    message: str = Field(..., min_length=1, description="Message body")


class DeliveryResult(BaseModel):
    """
    Outcome of a send attempt.

    Exactly one of provider_message_id (success) or error_kind (failure)
    is set.
    """

    success: bool
    provider_message_id: str | None = None
    error_kind: DeliveryErrorKind | None = None
    error_detail: str | None = Field(
        default=None,
        description="Raw transport error text, for logs and development responses"
    )

    @classmethod
    def delivered(cls, message_id: str) -> "DeliveryResult":
        return cls(success=True, provider_message_id=message_id)

    @classmethod
    def failed(cls, kind: DeliveryErrorKind, detail: str) -> "DeliveryResult":
        return cls(success=False, error_kind=kind, error_detail=detail)


class ContactResponse(BaseModel):
    """Body returned when a message was handed to the provider."""

    message: str = Field(default="Message sent successfully!")
    messageId: str | None = Field(
        default=None,
        description="Identifier assigned to the message by the mail transport"
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "message": "Message sent successfully!",
                "messageId": "<171234567890.12345.678@gmail.com>",
            }
        }
    }
