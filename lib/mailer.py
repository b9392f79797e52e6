# =============================================================================
# lib/mailer.py - Pooled SMTP Mail Transport
# =============================================================================
# This module provides the transport that hands composed messages to the
# mail provider:
# - A small pool of authenticated SMTP sessions (default: one)
# - A sliding window throttle on sends (default: 5 per 20 seconds)
# - Classification of transport failures into DeliveryErrorKind
#
# Sends beyond the rate wait at this layer; nothing is queued elsewhere.
#
# Usage:
#   transport = SMTPTransport("smtp.gmail.com", 465, user, password)
#   transport.verify()
#   message_id = transport.send(message)
# =============================================================================

from __future__ import annotations

import logging
import smtplib
import socket
import ssl
import threading
from contextlib import contextmanager
from email.message import EmailMessage
from email.utils import make_msgid
from typing import Iterator, Protocol

from core.models.contact import DeliveryErrorKind
from lib.rate_limiter import SlidingWindowRateLimiter

# Set up logging for this module
logger = logging.getLogger(__name__)


class MailTransport(Protocol):
    """What ContactService needs from a transport."""

    def verify(self) -> None:
        """Raise if a session cannot be opened and authenticated."""
        ...

    def send(self, message: EmailMessage) -> str:
        """Deliver the message and return its provider message id."""
        ...

    def close(self) -> None:
        ...


def classify_transport_error(exc: BaseException) -> DeliveryErrorKind:
    """
    Map a transport exception to a delivery error category.

    Order matters: smtplib errors and socket.gaierror are both OSError
    subclasses, so the specific checks come before the generic ones.
    """
    if isinstance(exc, smtplib.SMTPAuthenticationError):
        return DeliveryErrorKind.AUTH
    if isinstance(exc, socket.gaierror):
        return DeliveryErrorKind.HOST_NOT_FOUND
    if isinstance(
        exc,
        (
            smtplib.SMTPConnectError,
            smtplib.SMTPServerDisconnected,
            ConnectionError,
            TimeoutError,
        ),
    ):
        return DeliveryErrorKind.CONNECTION
    return DeliveryErrorKind.UNKNOWN


class SMTPTransport:
    """
    SMTP transport with a bounded session pool and a send throttle.

    Sessions are opened lazily, authenticated once and reused. An idle
    session is checked with NOOP before reuse; a dead one is dropped and
    replaced. A session that raised during use is never returned to the
    pool.

    Example:
        transport = SMTPTransport(
            host="smtp.gmail.com",
            port=465,
            user="me@gmail.com",
            password="app-password",
            max_connections=1,
            rate_limit=5,
            rate_delta=20.0,
        )
    """

    def __init__(
        self,
        host: str,
        port: int,
        user: str | None,
        password: str | None,
        use_ssl: bool = True,
        timeout: float = 30.0,
        max_connections: int = 1,
        rate_limit: int = 5,
        rate_delta: float = 20.0,
        rate_limiter: SlidingWindowRateLimiter | None = None,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.use_ssl = use_ssl
        self.timeout = timeout
        self.max_connections = max_connections

        self._rate_limiter = rate_limiter or SlidingWindowRateLimiter(
            limit=rate_limit,
            window_seconds=rate_delta,
        )
        self._slots = threading.BoundedSemaphore(max_connections)
        self._idle: list[smtplib.SMTP] = []
        self._idle_lock = threading.Lock()

    # -------------------------------------------------------------------------
    # Session Pool
    # -------------------------------------------------------------------------

    def _connect(self) -> smtplib.SMTP:
        """Open and authenticate a new session."""
        context = ssl.create_default_context()
        logger.debug(f"Opening SMTP session to {self.host}:{self.port}")

        if self.use_ssl:
            conn = smtplib.SMTP_SSL(
                self.host, self.port, timeout=self.timeout, context=context
            )
        else:
            conn = smtplib.SMTP(self.host, self.port, timeout=self.timeout)

        try:
            if not self.use_ssl:
                conn.ehlo()
                conn.starttls(context=context)
                conn.ehlo()
            conn.login(self.user or "", self.password or "")
        except Exception:
            conn.close()
            raise

        logger.info(f"SMTP session authenticated as {self.user}")
        return conn

    @staticmethod
    def _is_alive(conn: smtplib.SMTP) -> bool:
        try:
            status, _ = conn.noop()
        except (smtplib.SMTPException, OSError):
            return False
        return status == 250

    @staticmethod
    def _discard(conn: smtplib.SMTP) -> None:
        try:
            conn.close()
        except OSError:
            logger.debug("Ignoring error while closing a dead SMTP session")

    def _checkout(self) -> smtplib.SMTP:
        while True:
            with self._idle_lock:
                conn = self._idle.pop() if self._idle else None
            if conn is None:
                return self._connect()
            if self._is_alive(conn):
                return conn
            logger.debug("Dropping stale SMTP session from pool")
            self._discard(conn)

    def _checkin(self, conn: smtplib.SMTP) -> None:
        with self._idle_lock:
            self._idle.append(conn)

    @contextmanager
    def _session(self) -> Iterator[smtplib.SMTP]:
        """Borrow a session, holding one of the max_connections slots."""
        self._slots.acquire()
        conn = None
        try:
            conn = self._checkout()
            yield conn
        except Exception:
            if conn is not None:
                self._discard(conn)
                conn = None
            raise
        finally:
            if conn is not None:
                self._checkin(conn)
            self._slots.release()

    @property
    def idle_count(self) -> int:
        with self._idle_lock:
            return len(self._idle)

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def verify(self) -> None:
        """
        Check that a session can be opened and authenticated.

        The verified session stays in the pool for the following send.

        Raises:
            smtplib.SMTPException / OSError: If connecting or logging in fails
        """
        with self._session():
            pass
        logger.info("SMTP configuration verified")

    def send(self, message: EmailMessage) -> str:
        """
        Deliver a message, waiting for a rate slot first.

        Args:
            message: Fully composed message (From/To headers set)

        Returns:
            The message's Message-ID header, assigned here when missing

        Raises:
            smtplib.SMTPException / OSError: If delivery fails
        """
        if message["Message-ID"] is None:
            domain = (self.user or "").rpartition("@")[2] or None
            message["Message-ID"] = make_msgid(domain=domain)

        waited = self._rate_limiter.acquire()
        if waited:
            logger.info(f"Send throttled for {waited:.1f}s by rate limit")

        with self._session() as conn:
            conn.send_message(message)

        return str(message["Message-ID"])

    def close(self) -> None:
        """Quit every idle session."""
        with self._idle_lock:
            sessions, self._idle = self._idle, []

        for conn in sessions:
            try:
                conn.quit()
            except (smtplib.SMTPException, OSError):
                self._discard(conn)

        if sessions:
            logger.info(f"Closed {len(sessions)} SMTP session(s)")
