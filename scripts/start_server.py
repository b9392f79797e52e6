#!/usr/bin/env python3
# =============================================================================
# scripts/start_server.py - API Server Entry Point
# =============================================================================
# Starts the ContactRelay API with uvicorn on API_HOST:PORT.
#
# Usage:
#   # Start server (PORT defaults to 5000)
#   poetry run python scripts/start_server.py
#
#   # Or use uvicorn directly
#   poetry run uvicorn app.main:app --port 5000 --reload
#
# Prerequisites:
#   - EMAIL_USER and EMAIL_PASS set (.env file) for /send-message to work
# =============================================================================

import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import uvicorn

from app.config import settings


def main():
    """Start the API server."""
    uvicorn.run(
        "app.main:app",
        host=settings.API_HOST,
        port=settings.PORT,
        log_level="debug" if settings.DEBUG else "info",
        reload=settings.is_development,
    )


if __name__ == "__main__":
    main()
