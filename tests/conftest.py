# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Provides a recording fake mail transport (no network I/O)
# - Provides a TestClient wired to the fake transport
# =============================================================================

import os
import sys

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("EMAIL_USER", "owner@example.com")
os.environ.setdefault("EMAIL_PASS", "test-app-password")
os.environ.setdefault("NODE_ENV", "development")

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import itertools
from email.message import EmailMessage

import pytest
from fastapi.testclient import TestClient

from app.config import MailConfig, Settings, get_settings
from app.dependencies import get_mail_transport
from app.main import app


# =============================================================================
# Test Doubles
# =============================================================================

class FakeTransport:
    """
    In-memory MailTransport that records every call.

    Each successful send returns a fresh message id, recorded in ids.
    Set verify_error or send_error to make the corresponding step raise.
    """

    _counter = itertools.count(1)

    def __init__(self, verify_error: Exception | None = None, send_error: Exception | None = None):
        self.verify_error = verify_error
        self.send_error = send_error
        self.verify_calls = 0
        self.sent: list[EmailMessage] = []
        self.ids: list[str] = []
        self.closed = False

    @property
    def send_calls(self) -> int:
        return len(self.sent)

    def verify(self) -> None:
        self.verify_calls += 1
        if self.verify_error is not None:
            raise self.verify_error

    def send(self, message: EmailMessage) -> str:
        self.sent.append(message)
        if self.send_error is not None:
            raise self.send_error
        message_id = f"<fake-{next(self._counter)}@example.com>"
        self.ids.append(message_id)
        return message_id

    def close(self) -> None:
        self.closed = True


def make_settings(**overrides) -> Settings:
    """Settings built from explicit values, ignoring any .env file."""
    values = {
        "EMAIL_USER": "owner@example.com",
        "EMAIL_PASS": "test-app-password",
        "NODE_ENV": "development",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def reset_overrides():
    """Drop dependency overrides installed by a test."""
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def fake_transport():
    """A transport double that always succeeds."""
    return FakeTransport()


@pytest.fixture
def make_transport():
    """Factory for transport doubles with configured failures."""
    return FakeTransport


@pytest.fixture
def mail_config():
    """Complete development-mode mail configuration."""
    return MailConfig(
        user="owner@example.com",
        password="test-app-password",
        expose_error_details=True,
    )


@pytest.fixture
def valid_payload():
    """A contact form body that passes validation."""
    return {
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "message": "Hello!\nI enjoyed your portfolio.",
    }


@pytest.fixture
def settings_factory():
    """Build Settings from explicit values."""
    return make_settings


@pytest.fixture
def use_settings():
    """Install alternate settings for the duration of a test."""
    def _install(**overrides) -> Settings:
        custom = make_settings(**overrides)
        app.dependency_overrides[get_settings] = lambda: custom
        return custom
    return _install


@pytest.fixture
def use_transport():
    """Install a specific transport double for the duration of a test."""
    def _install(transport) -> None:
        app.dependency_overrides[get_mail_transport] = lambda: transport
    return _install


@pytest.fixture
def client(fake_transport, use_transport):
    """TestClient whose mail transport is the recording fake."""
    use_transport(fake_transport)
    return TestClient(app)
