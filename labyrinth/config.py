"""
Configuration module for the labyrinth service.

This module provides centralized configuration management using Pydantic settings.
All configuration values can be overridden via environment variables or .env file.
"""

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DIR = Path(__file__).resolve().parent

SUPPORTED_SESSION_ALGORITHMS = ("HS256", "HS384", "HS512")


class Settings(BaseSettings):
    """
    Application settings for the labyrinth service.

    Attributes:
        APP_NAME: Display name for the application
        SERVICE_NAME: Name used in logs and health reports
        DEBUG: Enable debug mode (shows API docs)
        HOST: Server bind address
        PORT: Server port number
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        USE_JSON_LOGGING: Emit JSON log lines instead of coloured text
        SESSION_SECRET_KEY: Key used to sign session cookies
        SESSION_COOKIE_NAME: Name of the session cookie
        SESSION_EXPIRE_MINUTES: Lifetime of a login
        SESSION_ALGORITHM: JWT algorithm for session cookies
        ADMIN_PASSWORD_HASH: bcrypt hash of the editor password
        AUTH_DISABLED: Treat every request as authenticated
        SEED_DEMO_DATA: Load the demo library at startup
        PAGES_DIR: Directory holding static HTML pages
    """

    APP_NAME: str = Field(
        default="Labyrinth of Babel",
        description="Display name for the application",
    )
    SERVICE_NAME: str = Field(
        default="labyrinth",
        description="Service name for logs and health checks",
    )
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    # Server configuration
    HOST: str = Field(
        default="0.0.0.0",
        description="Server bind address",
    )
    PORT: int = Field(
        default=8080,
        ge=1,
        le=65535,
        description="Server port number",
    )

    # Logging configuration
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    USE_JSON_LOGGING: bool = Field(
        default=False,
        description="Use structured JSON logs",
    )

    # Session configuration
    SESSION_SECRET_KEY: str = Field(
        default="change-me-labyrinth-session-secret-key",
        description="Secret key used to sign session cookies",
    )
    SESSION_COOKIE_NAME: str = Field(
        default="lob-session",
        description="Session cookie name",
    )
    SESSION_EXPIRE_MINUTES: int = Field(
        default=60 * 24,
        gt=0,
        description="Session lifetime in minutes",
    )
    SESSION_ALGORITHM: str = Field(
        default="HS256",
        description="JWT signing algorithm for sessions",
    )
    ADMIN_PASSWORD_HASH: Optional[str] = Field(
        default=None,
        description="bcrypt hash of the password that unlocks editing",
    )
    AUTH_DISABLED: bool = Field(
        default=False,
        description="Skip the login gate (development only)",
    )

    # Content
    SEED_DEMO_DATA: bool = Field(
        default=True,
        description="Populate the repository with demo cells at startup",
    )
    PAGES_DIR: Path = Field(
        default=PACKAGE_DIR / "pages",
        description="Directory of static HTML pages served under /page",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("SESSION_SECRET_KEY")
    @classmethod
    def validate_secret_key(cls, value: str) -> str:
        """
        Validate that the session secret is long enough to sign with.

        Raises:
            ValueError: If the key is shorter than 32 characters
        """
        if len(value) < 32:
            raise ValueError("SESSION_SECRET_KEY must be at least 32 characters")
        return value

    @field_validator("SESSION_ALGORITHM")
    @classmethod
    def validate_algorithm(cls, value: str) -> str:
        value = value.upper()
        if value not in SUPPORTED_SESSION_ALGORITHMS:
            raise ValueError(
                f"SESSION_ALGORITHM must be one of {', '.join(SUPPORTED_SESSION_ALGORITHMS)}, "
                f"got: {value}"
            )
        return value


# Global settings instance
settings = Settings()
