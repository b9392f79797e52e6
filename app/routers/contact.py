# =============================================================================
# app/routers/contact.py - Contact Form Endpoint
# =============================================================================
# Accepts contact form submissions and forwards them by email.
# Errors are raised as ContactRelayException subclasses and turned into
# responses by the handlers registered in main.py.
# =============================================================================

import logging

from fastapi import APIRouter, Request

from app.dependencies import ContactServiceDep, JsonPayloadDep
from core.models.contact import ContactResponse

logger = logging.getLogger(__name__)

router = APIRouter()


# Sync handler: SMTP I/O blocks, so FastAPI runs this in its threadpool
@router.post("/send-message", response_model=ContactResponse)
def send_message(
    request: Request,
    service: ContactServiceDep,
    payload: JsonPayloadDep,
):
    """
    Forward a contact form submission to the site owner.

    Expects a JSON body {"name", "email", "message"}. Returns the provider
    message id on success; 400 for invalid input, 500 for configuration or
    delivery failures.
    """
    logger.info(
        "Received contact form submission: "
        f"fields={sorted((payload or {}).keys())}, origin={request.headers.get('origin')}"
    )
    return service.handle(payload)
