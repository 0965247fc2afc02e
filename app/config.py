# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.DATA_DIR)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# The Settings class validates all values at startup, catching configuration
# errors early rather than at runtime.
# =============================================================================

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses pydantic-settings to:
    - Automatically load from .env file
    - Validate types and constraints
    - Provide sensible defaults for development

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=3000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    # -------------------------------------------------------------------------
    # Security
    # -------------------------------------------------------------------------

    SECRET_KEY: str = Field(
        default="dev-secret-key-change-in-production",
        min_length=16,
        description="Secret key for signing session tokens"
    )

    # Without an admin key, login is permanently unavailable and every
    # mutating endpoint stays inert.
    ADMIN_KEY: str | None = Field(
        default=None,
        description="Pre-shared administrative secret for the admin login"
    )

    SESSION_COOKIE_NAME: str = Field(
        default="portfolio_session",
        description="Cookie carrying the signed session token"
    )

    SESSION_MAX_AGE_SECONDS: int = Field(
        default=60 * 60 * 24 * 7,
        ge=60,
        description="Session lifetime in seconds (default: 7 days)"
    )

    CSRF_COOKIE_NAME: str = Field(
        default="csrf_token",
        description="Cookie carrying the double-submit CSRF token"
    )

    CSRF_HEADER_NAME: str = Field(
        default="x-csrf-token",
        description="Request header that must echo the CSRF token"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Storage Settings
    # -------------------------------------------------------------------------

    DATA_DIR: str = Field(
        default="data",
        description="Directory holding the config document and uploads"
    )

    CONFIG_FILENAME: str = Field(
        default="config.json",
        description="Filename of the profile/projects document inside DATA_DIR"
    )

    UPLOADS_DIRNAME: str = Field(
        default="uploads",
        description="Subdirectory of DATA_DIR for uploaded images"
    )

    UPLOADS_URL_PREFIX: str = Field(
        default="/data/uploads",
        description="Public path prefix stored in profileImage for uploads"
    )

    STORAGE_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        gt=0,
        le=300,
        description="Upper bound for a single document or upload I/O operation"
    )

    # -------------------------------------------------------------------------
    # File Upload Settings
    # -------------------------------------------------------------------------

    MAX_UPLOAD_SIZE_MB: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Maximum image upload size in MB"
    )

    ALLOWED_IMAGE_EXTENSIONS: str = Field(
        default=".jpg,.jpeg,.png,.gif,.webp",
        description="Allowed image file extensions (comma-separated)"
    )

    ALLOWED_IMAGE_TYPES: str = Field(
        default="image/jpeg,image/png,image/gif,image/webp",
        description="Allowed image MIME types (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        # Load from .env file in project root
        env_file=".env",
        env_file_encoding="utf-8",
        # Don't fail if .env doesn't exist (useful for production where
        # env vars are set directly)
        env_ignore_empty=True,
        # Case-sensitive environment variable names
        case_sensitive=True,
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://me.dev" -> ["http://localhost:3000", "https://me.dev"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def allowed_extensions_list(self) -> list[str]:
        """
        Parse ALLOWED_IMAGE_EXTENSIONS string into a list.

        Example: ".jpg, .PNG" -> [".jpg", ".png"]
        """
        return [ext.strip().lower() for ext in self.ALLOWED_IMAGE_EXTENSIONS.split(",")]

    @property
    def allowed_types_list(self) -> list[str]:
        """Parse ALLOWED_IMAGE_TYPES string into a list."""
        return [mime.strip().lower() for mime in self.ALLOWED_IMAGE_TYPES.split(",")]

    @property
    def max_upload_size_bytes(self) -> int:
        """
        Convert MB to bytes for file size validation.
        """
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024

    @property
    def data_path(self) -> Path:
        """Resolved data directory."""
        return Path(self.DATA_DIR)

    @property
    def admin_configured(self) -> bool:
        """True when a non-empty admin key is set."""
        return bool(self.ADMIN_KEY)

    @property
    def cookie_secure(self) -> bool:
        """Only mark cookies Secure when served over HTTPS in production."""
        return self.is_production

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access. This is the recommended pattern for
    pydantic-settings.

    Returns:
        Settings: The application settings instance
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
