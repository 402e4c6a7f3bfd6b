"""Application configuration with validation."""

from enum import Enum
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator, model_validator
from typing import List


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class ConfigurationError(Exception):
    """Raised when application configuration is invalid for the environment."""
    pass


class Settings(BaseSettings):
    """
    Application settings with validation.

    Uses Pydantic for configuration validation, preventing
    common mistakes like wildcard CORS or overlapping partitions.
    """

    # Environment
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development/production)"
    )

    # CORS Configuration
    cors_allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Allowed CORS origins (comma-separated)"
    )

    # Database Configuration (blob table + token table)
    database_url: str = Field(
        default="sqlite:///./blobgate.db",
        description="Database connection URL"
    )

    # Policy document location inside the blob store
    policy_key: str = Field(
        default="_config/policy.json",
        description="Blob key holding the JSON access policy"
    )
    # Seconds a loaded policy may be reused. 0 re-reads the document on
    # every request, so an upload is visible to the very next request.
    policy_cache_seconds: int = Field(
        default=0,
        ge=0,
        description="Policy snapshot TTL in seconds (0 = no caching)"
    )

    # Partitions: URL namespace -> store key prefix
    public_prefix: str = Field(
        default="public/",
        description="Store prefix served under /pub/"
    )
    restricted_prefix: str = Field(
        default="restricted/",
        description="Store prefix served under /priv/"
    )

    # HTTP caching
    listing_cache_seconds: int = Field(
        default=0,
        ge=0,
        description="max-age for /ls responses"
    )
    object_cache_seconds: int = Field(
        default=3600,
        ge=0,
        description="max-age for object reads"
    )

    # Store paging
    list_page_size: int = Field(
        default=1000,
        gt=0,
        description="Page size requested from the blob store when listing"
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

        # SECURITY: Prevent wildcard CORS
        if "*" in origins:
            raise ValueError(
                "Wildcard CORS (*) not allowed. "
                "Specify explicit origins in CORS_ALLOWED_ORIGINS"
            )

        return origins

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard Python logging levels."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v_upper

    @field_validator('public_prefix', 'restricted_prefix', 'policy_key')
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Must not be empty")
        return v.strip()

    @model_validator(mode="after")
    def validate_partitions(self) -> "Settings":
        """The two partitions must map to disjoint key spaces."""
        pub, priv = self.public_prefix, self.restricted_prefix
        if pub.startswith(priv) or priv.startswith(pub):
            raise ValueError(
                f"PUBLIC_PREFIX ({pub!r}) and RESTRICTED_PREFIX ({priv!r}) overlap"
            )
        return self

    def validate_production_config(self) -> None:
        """Validate configuration for production environment.

        In production, fails startup if CORS still allows local origins.
        In development, returns silently and main.py logs warnings.

        Raises:
            ConfigurationError: If production config is insecure.
        """
        errors: list[str] = []

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
        # Allow reading from environment variables with different case
        case_sensitive = False


# Global settings instance
settings = Settings()
