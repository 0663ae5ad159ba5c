"""Centralized settings management for the venue hierarchy service."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import make_url


class Settings(BaseSettings):
    """
    Application settings powered by pydantic-settings.

    Loads configuration from environment variables and a .env file located
    in the project root.
    """

    # -------------------------------------------------------------------------
    # ENVIRONMENT
    # -------------------------------------------------------------------------
    ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # -------------------------------------------------------------------------
    # DATABASE
    # -------------------------------------------------------------------------
    # Unset means the process-local in-memory term store is used.
    DATABASE_URL: str | None = None

    # -------------------------------------------------------------------------
    # GEOCODING
    # -------------------------------------------------------------------------
    NOMINATIM_DOMAIN: str = "nominatim.openstreetmap.org"
    NOMINATIM_USER_AGENT: str = "venue-hierarchy"
    GEOCODING_API_KEY: SecretStr | None = None
    GEOCODING_TIMEOUT: int = Field(default=10, gt=0)
    GEOCODING_MIN_DELAY_SECONDS: float = Field(default=1.0, ge=0)
    GEOCODE_CACHE_TTL: int = Field(default=3600, ge=0)

    # -------------------------------------------------------------------------
    # TAXONOMY
    # -------------------------------------------------------------------------
    TAXONOMY_NAMESPACE: str = "event-location"
    OWNING_RECORD_TYPE: str = "event"
    ARCHIVE_BASE_URL: str = "/location"
    MIN_LEVEL: int = Field(default=1, ge=1, le=6)
    MAX_LEVEL: int = Field(default=6, ge=1, le=6)

    # -------------------------------------------------------------------------
    # PATHS
    # -------------------------------------------------------------------------
    # BASE_DIR points to the project root
    BASE_DIR: Path = Path(__file__).resolve().parents[2]

    HIERARCHY_CONFIG_PATH: Path = Path(__file__).resolve().parent / "hierarchy.yaml"

    # -------------------------------------------------------------------------
    # CONFIGURATION
    # -------------------------------------------------------------------------
    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).resolve().parents[2] / ".env"),
        env_file_encoding="utf-8",
        # Allow extra fields in .env but ignore them in the model
        extra="ignore",
    )

    @model_validator(mode="after")
    def check_level_range(self) -> "Settings":
        if self.MIN_LEVEL > self.MAX_LEVEL:
            raise ValueError(
                f"MIN_LEVEL ({self.MIN_LEVEL}) must not exceed MAX_LEVEL ({self.MAX_LEVEL})"
            )
        return self

    @property
    def geocoder_user_agent(self) -> str:
        """User agent sent to Nominatim; an API key takes precedence."""
        if self.GEOCODING_API_KEY is not None:
            key = self.GEOCODING_API_KEY.get_secret_value()
            if key:
                return key
        return self.NOMINATIM_USER_AGENT

    def get_psycopg2_params(self) -> dict:
        """
        Parse DATABASE_URL into psycopg2-compatible connection parameters.

        Uses sqlalchemy.make_url for robust parsing of complex connection strings.

        Returns
        -------
        dict
            psycopg2 connection arguments (host, port, dbname, user, password).

        Raises
        ------
        RuntimeError
            If DATABASE_URL is not configured.
        """
        if not self.DATABASE_URL:
            raise RuntimeError("DATABASE_URL is not set.")
        url = make_url(self.DATABASE_URL)
        return {
            "host": url.host,
            "port": url.port,
            "dbname": url.database,
            "user": url.username,
            "password": url.password,
        }


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns
    -------
    Settings
        The singleton settings instance.
    """
    return Settings()
