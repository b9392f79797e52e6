# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - contact.py: Submission, delivery result and response schemas
#
# These models define the "contract" between API and clients.
# =============================================================================

from .contact import (
    DELIVERY_ERROR_MESSAGES,
    ContactResponse,
    DeliveryErrorKind,
    DeliveryResult,
    Submission,
)

__all__ = [
    "DELIVERY_ERROR_MESSAGES",
    "ContactResponse",
    "DeliveryErrorKind",
    "DeliveryResult",
    "Submission",
]
