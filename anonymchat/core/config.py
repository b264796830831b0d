"""Application configuration."""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import Union

from anonymchat.core.constants import (
    ACCESS_TOKEN_EXPIRE_MINUTES as DEFAULT_ACCESS_TOKEN_EXPIRE_MINUTES,
    MAX_UPLOAD_BYTES as DEFAULT_MAX_UPLOAD_BYTES,
)


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    # Storage
    DATA_DIR: str = "./data"
    UPLOADS_DIR: str = "./public/uploads"
    UPLOADS_URL_PREFIX: str = "/uploads"
    MAX_UPLOAD_BYTES: int = DEFAULT_MAX_UPLOAD_BYTES

    # Security
    SECRET_KEY: str = "your-secret-key-change-in-production"
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: str = "adminpass"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = DEFAULT_ACCESS_TOKEN_EXPIRE_MINUTES

    # CORS - Can be a list or comma-separated string
    CORS_ORIGINS: Union[list, str] = ["*"]  # In production, specify your domain

    @field_validator('CORS_ORIGINS', mode='before')
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS_ORIGINS from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(',') if origin.strip()]
        return v

    # Application
    APP_TITLE: str = "AnonymChat"
    APP_DESCRIPTION: str = "Anonymous forum with threaded messages and polls"
    APP_VERSION: str = "1.0.0"

    # Static text served on the "important information" page
    IMPORTANT_INFO_PATH: str = "./content/important-info.txt"

    # Environment
    ENVIRONMENT: str = "development"  # development, staging, production

    # Logging
    LOG_LEVEL: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL

    # Server-Sent Events (SSE) Configuration
    SSE_FEED_INTERVAL: int = 5  # Public feed push interval in seconds
    FEED_CACHE_TTL: float = 3.0  # Seconds a feed snapshot is reused across SSE clients

    def validate_production_config(self) -> None:
        """Validate that production-critical settings are properly configured."""
        if self.ENVIRONMENT == "production":
            issues = []
            warnings = []

            if self.SECRET_KEY == "your-secret-key-change-in-production":
                issues.append("SECRET_KEY must be changed from default value")

            if self.ADMIN_PASSWORD == "adminpass":
                issues.append("ADMIN_PASSWORD must be changed from default value")

            if not self.ADMIN_PASSWORD.startswith("$argon2"):
                warnings.append(
                    "ADMIN_PASSWORD is not hashed. For better security, use:\n"
                    "    python hash_password.py 'your-password'"
                )

            if self.CORS_ORIGINS == ["*"]:
                issues.append("CORS_ORIGINS should be restricted to specific domains")

            if warnings:
                print("⚠️  Production configuration warnings:")
                for warning in warnings:
                    print(f"  - {warning}")

            if issues:
                raise ValueError(
                    "Production configuration errors:\n" +
                    "\n".join(f"  - {issue}" for issue in issues)
                )


settings = Settings()
