# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
# Tests swap them out through app.dependency_overrides.
# =============================================================================

import json
from functools import lru_cache
from typing import Annotated, Any

from fastapi import Depends, Request

from app.config import Settings, get_settings, settings as app_settings
from app.exceptions import InvalidRequestBodyError
from core.services.contact_service import ContactService
from lib.mailer import MailTransport, SMTPTransport


def build_mail_transport(config: Settings) -> SMTPTransport:
    """Create an SMTP transport from settings."""
    return SMTPTransport(
        host=config.SMTP_HOST,
        port=config.SMTP_PORT,
        user=config.EMAIL_USER,
        password=config.EMAIL_PASS,
        use_ssl=config.SMTP_USE_SSL,
        timeout=config.SMTP_TIMEOUT,
        max_connections=config.MAIL_MAX_CONNECTIONS,
        rate_limit=config.MAIL_RATE_LIMIT,
        rate_delta=config.MAIL_RATE_DELTA_SECONDS,
    )


@lru_cache
def get_mail_transport() -> MailTransport:
    """
    Get the process-wide mail transport.

    A single instance is shared so its connection pool and rate limit
    apply across requests. Opening a session is deferred to first use.
    """
    return build_mail_transport(app_settings)


def get_contact_service(
    config: Annotated[Settings, Depends(get_settings)],
    transport: Annotated[MailTransport, Depends(get_mail_transport)],
) -> ContactService:
    """Build the per-request contact handler."""
    return ContactService(config.mail_config(), transport)


async def get_json_payload(request: Request) -> dict[str, Any] | None:
    """
    Decode a JSON object body.

    Bodies sent with a non-JSON content type (form posts, text) are not
    parsed and read as an empty payload, so they fail field validation.

    Raises:
        InvalidRequestBodyError: If a JSON body is malformed or not an object
    """
    media_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    if media_type != "application/json" and not media_type.endswith("+json"):
        return None

    body = await request.body()
    if not body:
        return None

    try:
        payload = json.loads(body)
    except ValueError:
        raise InvalidRequestBodyError()

    if not isinstance(payload, dict):
        raise InvalidRequestBodyError()
    return payload


# Type aliases for dependency injection
SettingsDep = Annotated[Settings, Depends(get_settings)]
ContactServiceDep = Annotated[ContactService, Depends(get_contact_service)]
JsonPayloadDep = Annotated[dict[str, Any] | None, Depends(get_json_payload)]
