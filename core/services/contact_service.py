# =============================================================================
# core/services/contact_service.py - Contact Form Relay Logic
# =============================================================================
# Turns a raw contact form payload into an email to the site operator.
#
# A request moves through these steps in order and stops at the first
# failure:
#   VALIDATE -> CONFIG_CHECK -> CONNECT_VERIFY -> SEND -> RESPOND
#
# Nothing is retried or deduplicated: two identical submissions produce two
# emails with two message ids.
# =============================================================================

import html
import logging
import re
from email.errors import HeaderParseError
from email.message import EmailMessage
from typing import Any

from app.config import MailConfig
from app.exceptions import (
    ConfigurationError,
    DeliveryError,
    InvalidEmailError,
    MissingFieldsError,
)
from core.models.contact import ContactResponse, DeliveryResult, Submission
from lib.mailer import MailTransport, classify_transport_error

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "email", "message")

# Permissive: local@domain.tld with no whitespace or extra "@".
# Applied with fullmatch so a trailing newline is rejected too.
EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")

HTML_TEMPLATE = """\
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #2563eb; border-bottom: 2px solid #e5e7eb; padding-bottom: 10px;">
    New Portfolio Contact Message
  </h2>
  <div style="background: #f9fafb; padding: 20px; border-radius: 8px; margin: 20px 0;">
    <p><strong>Name:</strong> {name}</p>
    <p><strong>Email:</strong> <a href="mailto:{email}">{email}</a></p>
  </div>
  <div style="margin: 20px 0;">
    <h3 style="color: #374151;">Message:</h3>
    <div style="background: white; padding: 15px; border-left: 4px solid #2563eb; margin: 10px 0;">
      {message}
    </div>
  </div>
  <hr style="margin: 30px 0; border: none; border-top: 1px solid #e5e7eb;">
  <p style="color: #6b7280; font-size: 14px;">
    This message was sent from your portfolio contact form.
  </p>
</div>
"""


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else str(value)


def validate_submission(payload: dict[str, Any] | None) -> Submission:
    """
    Check a raw request body and build a Submission from it.

    Falsy values ("", None, 0, [], ...) count as missing. Runs before any
    network I/O.

    Args:
        payload: Decoded JSON body (None when the body was empty)

    Returns:
        Submission with all three fields as strings

    Raises:
        MissingFieldsError: If any of name/email/message is absent or empty
        InvalidEmailError: If email does not match EMAIL_PATTERN
    """
    payload = payload or {}
    received = {field: bool(payload.get(field)) for field in REQUIRED_FIELDS}

    if not all(received.values()):
        logger.info(f"Validation failed - missing fields: {received}")
        raise MissingFieldsError(received)

    email = _as_text(payload["email"])
    if not EMAIL_PATTERN.fullmatch(email):
        logger.info("Validation failed - invalid email format")
        raise InvalidEmailError()

    return Submission(
        name=_as_text(payload["name"]),
        email=email,
        message=_as_text(payload["message"]),
    )


class ContactService:
    """
    Relays contact form submissions to the operator's inbox.

    The mail account sends the message to itself with Reply-To set to the
    visitor, so answering the email reaches the visitor directly.

    Example:
        service = ContactService(settings.mail_config(), transport)
        response = service.handle({"name": "Ada", "email": "ada@example.com", "message": "Hi"})
        response.messageId  # "<...@gmail.com>"
    """

    def __init__(self, config: MailConfig, transport: MailTransport):
        self.config = config
        self.transport = transport

    # -------------------------------------------------------------------------
    # Message Composition
    # -------------------------------------------------------------------------

    def render_html(self, submission: Submission) -> str:
        """HTML body; newlines in the message become <br>."""
        if self.config.escape_html:
            name = html.escape(submission.name)
            email = html.escape(submission.email)
            message = html.escape(submission.message)
        else:
            name, email, message = submission.name, submission.email, submission.message

        return HTML_TEMPLATE.format(
            name=name,
            email=email,
            message=message.replace("\n", "<br>"),
        )

    @staticmethod
    def render_text(submission: Submission) -> str:
        return (
            f"Name: {submission.name}\n"
            f"Email: {submission.email}\n\n"
            f"Message:\n{submission.message}"
        )

    def build_message(self, submission: Submission) -> EmailMessage:
        """
        Compose the email for a submission.

        The name is collapsed onto one line for the subject so a submitted
        newline cannot add headers.

        Raises:
            InvalidEmailError: If the address passed EMAIL_PATTERN but cannot
                be parsed as a Reply-To header
        """
        subject_name = " ".join(submission.name.split())

        msg = EmailMessage()
        msg["From"] = self.config.user
        msg["To"] = self.config.user
        try:
            msg["Reply-To"] = submission.email
        except (HeaderParseError, ValueError, AttributeError, IndexError):
            logger.info("Validation failed - email not usable as Reply-To")
            raise InvalidEmailError()
        msg["Subject"] = f"{self.config.subject_prefix}: Message from {subject_name}"
        msg.set_content(self.render_text(submission))
        msg.add_alternative(self.render_html(submission), subtype="html")
        return msg

    # -------------------------------------------------------------------------
    # Delivery
    # -------------------------------------------------------------------------

    def deliver(self, message: EmailMessage) -> DeliveryResult:
        """
        Verify the transport, then send.

        A verification failure is reported like any other delivery failure.
        Transport exceptions are categorized, never raised.
        """
        try:
            logger.info("Attempting to send email...")
            self.transport.verify()
            message_id = self.transport.send(message)
        except Exception as e:
            kind = classify_transport_error(e)
            logger.error(f"Error sending email ({kind.value}): {e}", exc_info=True)
            return DeliveryResult.failed(kind, str(e))

        logger.info(f"Email sent successfully: {message_id}")
        return DeliveryResult.delivered(message_id)

    def handle(self, payload: dict[str, Any] | None) -> ContactResponse:
        """
        Process one contact form submission end to end.

        Args:
            payload: Decoded JSON request body

        Returns:
            ContactResponse carrying the transport's message id

        Raises:
            MissingFieldsError / InvalidEmailError: Bad submission (400)
            InvalidEmailError: Address unusable as Reply-To (400)
            ConfigurationError: Mail credentials not set (500)
            DeliveryError: Transport failed (500)
        """
        submission = validate_submission(payload)

        if not self.config.has_credentials:
            logger.error(
                "Email credentials missing: "
                f"EMAIL_USER={bool(self.config.user)}, EMAIL_PASS={bool(self.config.password)}"
            )
            raise ConfigurationError()

        result = self.deliver(self.build_message(submission))

        if not result.success:
            raise DeliveryError(
                kind=result.error_kind,
                detail=result.error_detail,
                expose_detail=self.config.expose_error_details,
            )

        return ContactResponse(messageId=result.provider_message_id)
