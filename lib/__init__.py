# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - mailer.py: Pooled, rate-limited SMTP transport
# - rate_limiter.py: Blocking sliding window rate limiter
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.rate_limiter import SlidingWindowRateLimiter
from lib.mailer import MailTransport, SMTPTransport, classify_transport_error

__all__ = [
    "SlidingWindowRateLimiter",
    "MailTransport",
    "SMTPTransport",
    "classify_transport_error",
]
