"""Application configuration module.

This module contains settings for the TinyLink service,
loaded from environment variables with appropriate defaults.
"""

from __future__ import annotations

import string
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional, Union

from pydantic import Field, field_validator, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Directory of the tinylink package
PACKAGE_DIR = Path(__file__).resolve().parent.parent


class EnvironmentType(str, Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    """Application settings loaded from environment variables with defaults.

    Settings are loaded from environment variables, with fallback to
    values in .env file if present, and finally to the default values
    specified here.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment setting
    ENVIRONMENT: EnvironmentType = EnvironmentType.DEVELOPMENT

    # App Information
    APP_NAME: str = "TinyLink"
    APP_VERSION: str = "1.0"
    APP_DESCRIPTION: str = "A small URL shortening service with click counting"

    # HTTP configuration
    PORT: int = 3000
    BASE_URL: Optional[str] = None  # Falls back to http://localhost:{PORT}
    API_PREFIX: str = "/api"
    DEBUG: bool = False
    STATIC_DIR: str = str(PACKAGE_DIR / "static")

    # CORS settings
    CORS_ORIGINS: Union[List[str], str] = ["*"]

    # Short code configuration
    CODE_LENGTH: int = 6  # Length of generated codes
    CODE_CHARS: str = string.digits + string.ascii_uppercase + string.ascii_lowercase
    CODE_MAX_ATTEMPTS: int = 5  # Collision checks before deferring to the unique constraint

    # Database settings. DATABASE_URL wins over the individual components.
    DATABASE_URL: Optional[str] = None
    POSTGRES_SERVER: str = Field(default="localhost")
    POSTGRES_PORT: int = Field(default=5432)
    POSTGRES_USER: str = Field(default="postgres")
    POSTGRES_PASSWORD: str = Field(default="postgres")
    POSTGRES_DB: str = Field(default="tinylink")
    DB_SSL: bool = False  # TLS without certificate verification (hosted Postgres)

    # PostgreSQL pool settings
    POSTGRES_POOL_SIZE: int = 20
    POSTGRES_POOL_MAX_OVERFLOW: int = 10
    POSTGRES_POOL_TIMEOUT: int = 30
    POSTGRES_POOL_RECYCLE: int = 300
    DB_ECHO: bool = False
    DB_CREATE_TABLES: bool = True  # create_all on startup, for development and tests
    DB_RUN_MIGRATIONS: bool = False  # alembic upgrade head on startup

    # Logging configuration
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_FILENAME: str = "app.log"
    LOG_FILE_ENABLED: bool = True
    LOG_ROTATION: str = "10 MB"
    LOG_RETENTION: str = "7 days"
    LOG_FORMAT: str = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {message}"
    LOG_JSON: bool = True
    REQUEST_LOGGING_ENABLED: bool = True  # Enable request logging middleware
    CLICK_LOGGING_ENABLED: bool = True  # Separate access log for redirects

    # Validators
    @field_validator("CORS_ORIGINS")
    def validate_list_or_string(cls, v: Union[List[str], str]) -> List[str]:
        """Convert comma-separated string to list if needed."""
        if isinstance(v, str):
            if not v.strip():
                return []
            if v == "*":
                return ["*"]
            return [item.strip() for item in v.split(",")]
        return v

    @field_validator("DATABASE_URL", "BASE_URL", mode="before")
    def empty_string_to_none(cls, v: Any) -> Optional[str]:
        """Treat empty environment values as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    # Computed fields
    @computed_field
    def PUBLIC_BASE_URL(self) -> str:
        """Base URL used when rendering short links."""
        return (self.BASE_URL or f"http://localhost:{self.PORT}").rstrip("/")

    @computed_field
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        """Construct the SQLAlchemy database URI from settings or use override."""
        if self.DATABASE_URL:
            url = self.DATABASE_URL
            # Hosted providers hand out libpq style URLs
            for prefix in ("postgres://", "postgresql://"):
                if url.startswith(prefix):
                    return "postgresql+asyncpg://" + url[len(prefix):]
            return url

        return f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    @computed_field
    def SYNC_DATABASE_URI(self) -> str:
        """Database URI with a synchronous driver, used by alembic."""
        return str(self.SQLALCHEMY_DATABASE_URI).replace("+asyncpg", "+psycopg").replace("+aiosqlite", "")


# Create a singleton instance of the settings
settings = Settings()
