"""
app/core/config.py

Purpose: Application configuration

- Loads environment variables
- Centralizes config values (DB URI, store backend, admin credentials, etc.)
- Validates configuration on startup
- Environment-specific settings
"""

from pydantic import Field, field_validator, ValidationInfo
from pydantic_settings import BaseSettings
from typing import Literal

DEFAULT_ADMIN_PASSWORD = "admin123"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Validates all required configs on startup.
    """

    # Environment
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"

    # MongoDB
    MONGODB_URL: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection URI"
    )
    MONGODB_DB_NAME: str = Field(
        default="user_directory",
        description="MongoDB database name"
    )

    # User store
    STORE_BACKEND: Literal["mongo", "memory"] = Field(
        default="mongo",
        description="Backing store for user records (mongo or in-process memory)"
    )
    SEED_SAMPLE_DATA: bool = Field(
        default=True,
        description="Insert sample users on startup when the store is empty"
    )

    # Application
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    API_PREFIX: str = Field(
        default="/api",
        description="API route prefix"
    )
    CORS_ORIGINS: list = Field(
        default=["*"],
        description="Allowed CORS origins"
    )

    # Security (static credential pair guarding DELETE)
    ADMIN_USERNAME: str = Field(
        default="admin",
        description="Username accepted by the Basic auth gate"
    )
    ADMIN_PASSWORD: str = Field(
        default=DEFAULT_ADMIN_PASSWORD,
        description="Password accepted by the Basic auth gate"
    )

    @field_validator("ADMIN_PASSWORD")
    @classmethod
    def validate_admin_password(cls, v: str, info: ValidationInfo) -> str:
        """Ensure the demo password is changed in production."""
        if info.data.get("ENVIRONMENT") == "production" and v == DEFAULT_ADMIN_PASSWORD:
            raise ValueError("ADMIN_PASSWORD must be changed in production environment")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"

    class Config:
        env_file = ".env"
        case_sensitive = True
        env_file_encoding = "utf-8"
        extra = "ignore"


# Global settings instance
settings = Settings()


def validate_settings():
    """
    Validates critical settings on application startup.
    Raises ValueError if any required setting is missing or invalid.
    """
    errors = []

    # MongoDB is only needed when it backs the store
    if settings.STORE_BACKEND == "mongo":
        if not settings.MONGODB_URL:
            errors.append("MONGODB_URL is required")
        if not settings.MONGODB_DB_NAME:
            errors.append("MONGODB_DB_NAME is required")

    if not settings.ADMIN_USERNAME or not settings.ADMIN_PASSWORD:
        errors.append("ADMIN_USERNAME and ADMIN_PASSWORD are required")

    # Production-specific validations
    if settings.is_production and settings.STORE_BACKEND == "memory":
        errors.append("STORE_BACKEND=memory is not allowed in production")

    if errors:
        raise ValueError(f"Configuration validation failed: {', '.join(errors)}")

    return True
