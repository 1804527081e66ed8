"""Application configuration with validation."""

from enum import Enum
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import List


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class ConfigurationError(Exception):
    """Raised when application configuration is invalid for the environment."""
    pass


DEFAULT_ALLOWED_MIME_TYPES = ",".join([
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "image/svg+xml",
    "video/mp4",
    "video/webm",
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
])


class Settings(BaseSettings):
    """
    Application settings with validation.

    Every field can be overridden by an environment variable of the same
    name (case-insensitive) or by an entry in ``.env``.
    """

    # Environment
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development/production)"
    )

    # CORS Configuration (the admin panel runs on its own origin)
    cors_allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Allowed CORS origins (comma-separated)"
    )

    # Database Configuration
    database_url: str = Field(
        default="sqlite:///./mediatheque.db",
        description="Database connection URL"
    )
    # Connection pool tuning (PostgreSQL only; ignored for SQLite).
    db_pool_size: int = Field(default=5)
    db_max_overflow: int = Field(default=10)
    db_pool_timeout: int = Field(
        default=30,
        description="Seconds to wait for a connection from the pool before raising"
    )
    db_pool_recycle: int = Field(default=1800)

    # Authentication
    # Tokens are issued by the panel's auth service; this API only verifies them.
    jwt_secret_key: str = Field(
        default="dev-insecure-key-change-me",
        description="JWT verification secret (override in production)"
    )
    jwt_algorithm: str = Field(default="HS256")
    auth_enabled: bool = Field(
        default=False,
        description="Require a bearer token on every media endpoint"
    )

    # Upload storage
    upload_dir: str = Field(
        default="./uploads",
        description="Directory where uploaded blobs are written"
    )
    media_url_prefix: str = Field(
        default="/uploads",
        description="Public URL prefix under which stored blobs are served"
    )
    max_upload_size: int = Field(
        default=10 * 1024 * 1024,
        description="Maximum size of a single uploaded file in bytes"
    )
    max_files_per_upload: int = Field(
        default=10,
        description="Maximum number of files in one upload batch"
    )
    allowed_mime_types: str = Field(
        default=DEFAULT_ALLOWED_MIME_TYPES,
        description="Accepted upload MIME types (comma-separated)"
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: str = Field(
        default="json",
        description="Log output format: 'json' for structured, 'text' for human-readable"
    )

    def get_cors_origins(self) -> List[str]:
        """
        Get CORS origins as a list.

        Parses comma-separated string and validates no wildcards.
        """
        origins = [origin.strip() for origin in self.cors_allowed_origins.split(',') if origin.strip()]

        if "*" in origins:
            raise ValueError(
                "Wildcard CORS (*) not allowed. "
                "Specify explicit origins in CORS_ALLOWED_ORIGINS"
            )

        return origins

    def get_allowed_mime_types(self) -> List[str]:
        return [m.strip().lower() for m in self.allowed_mime_types.split(',') if m.strip()]

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard Python logging levels."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v_upper

    @field_validator('media_url_prefix')
    @classmethod
    def normalize_url_prefix(cls, v: str) -> str:
        v = "/" + v.strip().strip("/")
        if v == "/":
            raise ValueError("media_url_prefix cannot be the site root")
        return v

    @field_validator('max_upload_size', 'max_files_per_upload')
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Upload limits must be positive")
        return v

    def validate_production_config(self) -> None:
        """Validate configuration for production environment.

        In production, fails startup if security-critical settings use insecure defaults.
        In development, returns silently; main.py logs the warnings.

        Raises:
            ConfigurationError: If production config is insecure.
        """
        errors: list[str] = []

        if self.jwt_secret_key == "dev-insecure-key-change-me":
            errors.append(
                "JWT_SECRET_KEY is using the default insecure value. "
                "Set it to the secret used by the panel's auth service."
            )

        if not self.auth_enabled:
            errors.append(
                "AUTH_ENABLED is false. "
                "Media endpoints must be authenticated in production."
            )

        origins = self.get_cors_origins()
        localhost_origins = [o for o in origins if "localhost" in o or "127.0.0.1" in o]
        if localhost_origins:
            errors.append(
                f"CORS allows localhost origins: {localhost_origins}. "
                "Remove localhost origins for production."
            )

        if errors and self.environment == Environment.PRODUCTION:
            raise ConfigurationError(
                "Production configuration is insecure:\n  - " + "\n  - ".join(errors)
            )

    class Config:
        """Pydantic configuration."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Global settings instance
settings = Settings()
