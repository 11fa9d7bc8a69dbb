"""Application configuration."""

import os
from typing import Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _get_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        """Initialize settings from environment variables."""
        # API Settings
        self.API_TITLE: str = os.getenv("API_TITLE", "School Planning")
        self.API_VERSION: str = os.getenv("API_VERSION", "0.1.0")
        self.DEBUG: bool = _get_bool("DEBUG", "False")
        self.ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development").lower()
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

        # Server Settings
        self.HOST: str = os.getenv("HOST", "0.0.0.0")
        self.PORT: int = int(os.getenv("PORT", "8000"))

        # Database Settings
        self.DB_HOST: str = os.getenv("DB_HOST", "localhost")
        self.DB_PORT: int = int(os.getenv("DB_PORT", "5432"))
        self.DB_USER: str = os.getenv("DB_USER", "postgres")
        self.DB_PASSWORD: str = os.getenv("DB_PASSWORD", "")
        self.DB_NAME: str = os.getenv("DB_NAME", "schoolplan")
        self.DATABASE_URL: Optional[str] = os.getenv("DATABASE_URL") or None
        self.RUN_MIGRATIONS: bool = _get_bool("RUN_MIGRATIONS", "True")

        # Planning Settings
        # Replaces probing the monthly plan table for a `sequence` column.
        self.SEQUENCE_DISCRIMINATOR_ENABLED: bool = _get_bool(
            "SEQUENCE_DISCRIMINATOR_ENABLED", "True"
        )
        self.UPSERT_MAX_ATTEMPTS: int = int(os.getenv("UPSERT_MAX_ATTEMPTS", "5"))

        # Pagination Settings
        self.DEFAULT_TIMETABLE_PAGE_SIZE: int = int(
            os.getenv("DEFAULT_TIMETABLE_PAGE_SIZE", "100")
        )
        self.DEFAULT_MONTHLY_PLAN_PAGE_SIZE: int = int(
            os.getenv("DEFAULT_MONTHLY_PLAN_PAGE_SIZE", "200")
        )
        self.MAX_PAGE_SIZE: int = int(os.getenv("MAX_PAGE_SIZE", "500"))

    @property
    def is_production(self) -> bool:
        """Whether the service runs in production."""
        return self.ENVIRONMENT == "production"

    @property
    def is_development(self) -> bool:
        """Whether the service runs in development."""
        return self.ENVIRONMENT == "development"


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return settings
