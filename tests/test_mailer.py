# =============================================================================
# tests/test_mailer.py - SMTP Transport Tests
# =============================================================================
# Tests for lib/mailer.py with smtplib patched out:
# - Session pooling and reuse
# - Failure handling (stale sessions, login errors, send errors)
# - Error classification
# =============================================================================

import smtplib
import socket
import threading
import time
from email.message import EmailMessage
from unittest.mock import MagicMock, patch

import pytest

from core.models.contact import DeliveryErrorKind
from lib.mailer import SMTPTransport, classify_transport_error


def _session():
    """A MagicMock shaped like a healthy smtplib session."""
    conn = MagicMock()
    conn.noop.return_value = (250, b"OK")
    return conn


def _message() -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = "owner@gmail.com"
    msg["To"] = "owner@gmail.com"
    msg["Subject"] = "Portfolio Contact: Message from Ada"
    msg.set_content("hello")
    return msg


@pytest.fixture
def limiter():
    limiter = MagicMock()
    limiter.acquire.return_value = 0.0
    return limiter


@pytest.fixture
def transport(limiter):
    return SMTPTransport(
        host="smtp.gmail.com",
        port=465,
        user="owner@gmail.com",
        password="app-password",
        rate_limiter=limiter,
    )


# =============================================================================
# Session Pool
# =============================================================================

class TestSessionPool:
    """Tests for connecting, verifying and reusing sessions."""

    def test_verify_opens_and_authenticates(self, transport):
        """verify() connects over TLS and logs in."""
        with patch("lib.mailer.smtplib.SMTP_SSL", return_value=_session()) as smtp_ssl:
            transport.verify()

        smtp_ssl.assert_called_once()
        args, kwargs = smtp_ssl.call_args
        assert args == ("smtp.gmail.com", 465)
        assert kwargs["timeout"] == 30.0
        smtp_ssl.return_value.login.assert_called_once_with("owner@gmail.com", "app-password")
        assert transport.idle_count == 1

    def test_send_reuses_verified_session(self, transport):
        """verify() then send() uses a single connection."""
        conn = _session()
        with patch("lib.mailer.smtplib.SMTP_SSL", return_value=conn) as smtp_ssl:
            transport.verify()
            transport.send(_message())

        assert smtp_ssl.call_count == 1
        conn.send_message.assert_called_once()

    def test_starttls_when_not_ssl(self, limiter):
        """Plain SMTP sessions are upgraded before login."""
        transport = SMTPTransport(
            host="smtp.example.com",
            port=587,
            user="owner@example.com",
            password="secret",
            use_ssl=False,
            rate_limiter=limiter,
        )
        conn = _session()

        with patch("lib.mailer.smtplib.SMTP", return_value=conn):
            transport.verify()

        conn.starttls.assert_called_once()
        conn.login.assert_called_once_with("owner@example.com", "secret")

    def test_stale_session_is_replaced(self, transport):
        """A pooled session failing NOOP is dropped for a new one."""
        stale, fresh = _session(), _session()
        stale.noop.side_effect = smtplib.SMTPServerDisconnected("gone")

        with patch("lib.mailer.smtplib.SMTP_SSL", side_effect=[stale, fresh]) as smtp_ssl:
            transport.verify()
            transport.send(_message())

        assert smtp_ssl.call_count == 2
        stale.close.assert_called_once()
        fresh.send_message.assert_called_once()

    def test_login_failure_closes_connection(self, transport):
        """Rejected credentials propagate and nothing is pooled."""
        conn = _session()
        conn.login.side_effect = smtplib.SMTPAuthenticationError(535, b"bad credentials")

        with patch("lib.mailer.smtplib.SMTP_SSL", return_value=conn):
            with pytest.raises(smtplib.SMTPAuthenticationError):
                transport.verify()

        conn.close.assert_called_once()
        assert transport.idle_count == 0

    def test_send_failure_discards_session(self, transport):
        """A session that failed mid-send is not reused."""
        conn = _session()
        conn.send_message.side_effect = smtplib.SMTPServerDisconnected("dropped")

        with patch("lib.mailer.smtplib.SMTP_SSL", return_value=conn):
            with pytest.raises(smtplib.SMTPServerDisconnected):
                transport.send(_message())

        assert transport.idle_count == 0

    def test_slot_released_after_failure(self, transport):
        """Failures do not leak the single connection slot."""
        with patch("lib.mailer.smtplib.SMTP_SSL", side_effect=[ConnectionRefusedError(), _session()]):
            with pytest.raises(ConnectionRefusedError):
                transport.verify()
            transport.verify()

        assert transport.idle_count == 1

    def test_close_quits_idle_sessions(self, transport):
        """close() ends every pooled session."""
        conn = _session()
        with patch("lib.mailer.smtplib.SMTP_SSL", return_value=conn):
            transport.verify()

        transport.close()

        conn.quit.assert_called_once()
        assert transport.idle_count == 0


class TestConnectionLimit:
    """At most max_connections sessions are in use at once."""

    def test_second_send_waits_for_slot(self, transport):
        """With one slot, a second send blocks until the first finishes."""
        entered = threading.Event()
        release = threading.Event()
        lock = threading.Lock()
        state = {"active": 0, "peak": 0}

        def blocking_send(message):
            with lock:
                state["active"] += 1
                state["peak"] = max(state["peak"], state["active"])
            entered.set()
            release.wait(timeout=5)
            with lock:
                state["active"] -= 1

        conn = _session()
        conn.send_message.side_effect = blocking_send
        errors = []

        def worker():
            try:
                transport.send(_message())
            except Exception as e:  # surfaced through the errors list
                errors.append(e)

        with patch("lib.mailer.smtplib.SMTP_SSL", return_value=conn) as smtp_ssl:
            first = threading.Thread(target=worker)
            first.start()
            assert entered.wait(timeout=5)

            second = threading.Thread(target=worker)
            second.start()
            time.sleep(0.2)

            # Second send is parked on the slot, not on a new session
            assert conn.send_message.call_count == 1
            assert smtp_ssl.call_count == 1
            assert second.is_alive()

            release.set()
            first.join(timeout=5)
            second.join(timeout=5)

        assert errors == []
        assert not second.is_alive()
        assert conn.send_message.call_count == 2
        assert smtp_ssl.call_count == 1
        assert state["peak"] == 1
        assert transport.idle_count == 1


# =============================================================================
# Sending
# =============================================================================

class TestSend:
    """Tests for SMTPTransport.send."""

    def test_assigns_message_id(self, transport):
        """Messages without an id get one under the account's domain."""
        msg = _message()
        with patch("lib.mailer.smtplib.SMTP_SSL", return_value=_session()):
            message_id = transport.send(msg)

        assert message_id == msg["Message-ID"]
        assert message_id.endswith("@gmail.com>")

    def test_keeps_existing_message_id(self, transport):
        """An id set by the caller is returned unchanged."""
        msg = _message()
        msg["Message-ID"] = "<custom-id@example.com>"

        with patch("lib.mailer.smtplib.SMTP_SSL", return_value=_session()):
            assert transport.send(msg) == "<custom-id@example.com>"

    def test_distinct_ids_per_send(self, transport):
        """Each send yields its own id."""
        with patch("lib.mailer.smtplib.SMTP_SSL", return_value=_session()):
            first = transport.send(_message())
            second = transport.send(_message())

        assert first != second

    def test_waits_on_rate_limiter(self, transport, limiter):
        """Every send takes a rate slot."""
        with patch("lib.mailer.smtplib.SMTP_SSL", return_value=_session()):
            transport.send(_message())
            transport.send(_message())

        assert limiter.acquire.call_count == 2

    def test_verify_does_not_take_rate_slot(self, transport, limiter):
        """Only sends count against the rate limit."""
        with patch("lib.mailer.smtplib.SMTP_SSL", return_value=_session()):
            transport.verify()

        limiter.acquire.assert_not_called()


# =============================================================================
# Error Classification
# =============================================================================

class TestClassifyTransportError:
    """Tests for classify_transport_error."""

    @pytest.mark.parametrize("exc,kind", [
        (smtplib.SMTPAuthenticationError(535, b"bad"), DeliveryErrorKind.AUTH),
        (socket.gaierror(-2, "Name or service not known"), DeliveryErrorKind.HOST_NOT_FOUND),
        (smtplib.SMTPConnectError(421, b"busy"), DeliveryErrorKind.CONNECTION),
        (smtplib.SMTPServerDisconnected("closed"), DeliveryErrorKind.CONNECTION),
        (ConnectionRefusedError(111, "refused"), DeliveryErrorKind.CONNECTION),
        (ConnectionResetError(104, "reset"), DeliveryErrorKind.CONNECTION),
        (TimeoutError("timed out"), DeliveryErrorKind.CONNECTION),
        (smtplib.SMTPRecipientsRefused({}), DeliveryErrorKind.UNKNOWN),
        (ValueError("odd"), DeliveryErrorKind.UNKNOWN),
    ])
    def test_categories(self, exc, kind):
        assert classify_transport_error(exc) == kind
