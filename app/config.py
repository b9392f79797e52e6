# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.EMAIL_USER)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# Mail credentials are optional at startup: a missing EMAIL_USER/EMAIL_PASS
# is reported per request as a server configuration error, not a crash.
# =============================================================================

from dataclasses import dataclass
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_CORS_ORIGINS = ",".join([
    "https://portfolio-alpha-seven-38.vercel.app",
    "http://localhost:3000",
    "http://localhost:5173",
])


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses pydantic-settings to:
    - Automatically load from .env file
    - Validate types and constraints
    - Provide sensible defaults for development

    All settings are accessed via the global `settings` instance, or
    through the `get_settings` dependency inside route handlers.
    """

    # -------------------------------------------------------------------------
    # Mail Account
    # -------------------------------------------------------------------------
    # The account both sends and receives contact messages

    EMAIL_USER: str | None = Field(
        default=None,
        description="Mail account identity (e.g., you@gmail.com)"
    )

    EMAIL_PASS: str | None = Field(
        default=None,
        description="Mail account secret (Gmail app password)"
    )

    # -------------------------------------------------------------------------
    # Mail Provider
    # -------------------------------------------------------------------------

    SMTP_HOST: str = Field(
        default="smtp.gmail.com",
        description="SMTP host of the mail provider"
    )

    SMTP_PORT: int = Field(
        default=465,
        ge=1,
        le=65535,
        description="SMTP port (465 for implicit TLS, 587 for STARTTLS)"
    )

    SMTP_USE_SSL: bool = Field(
        default=True,
        description="Use implicit TLS; when false the session is upgraded with STARTTLS"
    )

    SMTP_TIMEOUT: float = Field(
        default=30.0,
        gt=0,
        description="Socket timeout in seconds for SMTP operations"
    )

    # -------------------------------------------------------------------------
    # Transport Throttling
    # -------------------------------------------------------------------------
    # Keeps the provider from flagging the account for bursts of mail

    MAIL_MAX_CONNECTIONS: int = Field(
        default=1,
        ge=1,
        le=10,
        description="Maximum concurrent SMTP sessions held open"
    )

    MAIL_RATE_LIMIT: int = Field(
        default=5,
        ge=1,
        description="Maximum messages sent per rate window"
    )

    MAIL_RATE_DELTA_SECONDS: float = Field(
        default=20.0,
        gt=0,
        description="Length of the rate window in seconds"
    )

    # -------------------------------------------------------------------------
    # Message Composition
    # -------------------------------------------------------------------------

    MAIL_SUBJECT_PREFIX: str = Field(
        default="Portfolio Contact",
        description="Prefix of the subject line of forwarded messages"
    )

    MAIL_ESCAPE_HTML: bool = Field(
        default=True,
        description="HTML-escape submitted fields in the HTML body"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    NODE_ENV: str = Field(
        default="production",
        description="Runtime mode; 'development' exposes error details in responses"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug logging"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    PORT: int = Field(
        default=5000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default=DEFAULT_CORS_ORIGINS,
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        # Empty values count as unset, so EMAIL_PASS= reads as missing
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://myapp.com" -> ["http://localhost:3000", "https://myapp.com"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.NODE_ENV == "development"

    @property
    def email_configured(self) -> bool:
        """Both mail credentials are present."""
        return bool(self.EMAIL_USER) and bool(self.EMAIL_PASS)

    def mail_config(self) -> "MailConfig":
        """Snapshot of the values the contact handler needs."""
        return MailConfig(
            user=self.EMAIL_USER,
            password=self.EMAIL_PASS,
            subject_prefix=self.MAIL_SUBJECT_PREFIX,
            escape_html=self.MAIL_ESCAPE_HTML,
            expose_error_details=self.is_development,
        )


@dataclass(frozen=True)
class MailConfig:
    """Configuration injected into ContactService."""
    user: str | None
    password: str | None
    subject_prefix: str = "Portfolio Contact"
    escape_html: bool = True
    expose_error_details: bool = False

    @property
    def has_credentials(self) -> bool:
        return bool(self.user) and bool(self.password)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.

    Returns:
        Settings: The application settings instance
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
