"""Application configuration and settings management.

This module defines the application settings loaded from environment
variables and provides helpers for accessing cached settings and for
configuring logging.
"""

import logging
from functools import lru_cache
from typing import List

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class Settings(BaseSettings):
    """Application configuration loaded from environment variables.

    Attributes:
        DATABASE_URL: Full database connection string. Takes precedence
            over the individual ``DB_*`` parts when set.
        DB_HOST: Database host.
        DB_PORT: Database port.
        DB_USER: Database user.
        DB_PASSWORD: Database password.
        DB_NAME: Database name.
        LOG_LEVEL: Root log level for the application loggers.
        ALLOWED_ORIGINS: Allowed origins for CORS.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="allow")

    DATABASE_URL: str | None = None
    DB_HOST: str | None = None
    DB_PORT: str | None = None
    DB_USER: str = ""
    DB_PASSWORD: str = ""
    DB_NAME: str | None = None
    LOG_LEVEL: str = "INFO"
    ALLOWED_ORIGINS: List[str] = ["*"]

    @model_validator(mode="after")
    def require_database(self) -> "Settings":
        """Abort when neither a URL nor the required ``DB_*`` parts are set."""
        if self.DATABASE_URL:
            return self
        missing = [
            name
            for name in ("DB_HOST", "DB_PORT", "DB_NAME")
            if not getattr(self, name)
        ]
        if missing:
            raise ValueError(
                "Missing required database environment variables: "
                + ", ".join(missing)
            )
        return self

    @property
    def database_url(self) -> str:
        """Return the SQLAlchemy URL for the configured database."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"mysql+pymysql://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}?charset=utf8mb4"
        )


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings.

    The settings object is cached to prevent reloading environment
    variables multiple times during application lifetime.
    """

    return Settings()


def configure_logging(level: str = "INFO") -> None:
    """Attach a single stream handler to the ``contact_book`` logger."""
    logger = logging.getLogger("contact_book")
    logger.setLevel(level.upper())
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
