# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Server status and mail configuration status endpoints
# - contact.py: Contact form submission endpoint
#
# Each router is mounted in main.py.
# =============================================================================

from . import health
from . import contact

__all__ = [
    "health",
    "contact",
]
