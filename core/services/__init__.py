# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .contact_service import ContactService, validate_submission

__all__ = [
    "ContactService",
    "validate_submission",
]
