# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the ContactRelay API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   poetry run uvicorn app.main:app --port 5000 --reload
#   poetry run python scripts/start_server.py
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import settings
from app.dependencies import get_mail_transport
from app.exceptions import (
    ContactRelayException,
    contact_relay_exception_handler,
    not_found_exception_handler,
    unhandled_exception_handler,
)
from app.routers import contact, health

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    - Startup: report listen address and mail configuration status
    - Shutdown: close pooled SMTP sessions
    """
    logger.info(f"Server running on port {settings.PORT} ({settings.NODE_ENV} mode)")
    logger.info(f"Health check: http://localhost:{settings.PORT}/")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    logger.info(
        "Email config status: "
        f"EMAIL_USER={bool(settings.EMAIL_USER)}, EMAIL_PASS={bool(settings.EMAIL_PASS)}"
    )
    if not settings.email_configured:
        logger.warning("Email credentials not configured; /send-message will return 500")

    yield

    logger.info("Shutting down ContactRelay API")
    get_mail_transport().close()


# Create FastAPI application
app = FastAPI(
    title="ContactRelay API",
    description="Relays portfolio contact form submissions to the owner's inbox by email.",
    version="1.0.0",
    lifespan=lifespan,
)


# =============================================================================
# Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

app.add_exception_handler(ContactRelayException, contact_relay_exception_handler)
app.add_exception_handler(StarletteHTTPException, not_found_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)


# =============================================================================
# Routers
# =============================================================================

app.include_router(health.router, tags=["Health"])
app.include_router(contact.router, tags=["Contact"])
