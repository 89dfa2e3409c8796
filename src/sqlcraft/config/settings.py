"""
Configuration management for sqlcraft.

Settings are read from environment variables with the ``SQLCRAFT_`` prefix
(and an optional ``.env`` file) using Pydantic BaseSettings. A cached
instance is available through :func:`get_settings`.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

import structlog
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = structlog.get_logger(__name__)

SETTINGS_ENV_FILE = Path(os.getenv("SQLCRAFT_ENV_FILE", ".env")).expanduser()


class Settings(BaseSettings):
    """
    Runtime settings with environment variable support.

    Environment variables are loaded with the SQLCRAFT_ prefix. For example,
    SQLCRAFT_MULTIROW_INSERT_POLICY=error turns the multi-row INSERT warning
    into a hard failure.
    """

    model_config = SettingsConfigDict(
        env_prefix="SQLCRAFT_",
        env_file=SETTINGS_ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_to_file: bool = Field(default=False, description="Also write logs to a rotating file")
    log_file_dir: str = Field(default="logs", description="Directory for log files")

    # Serialization
    default_dialect: str = Field(
        default="postgresql",
        description="Dialect used when a connection does not announce one",
    )
    multirow_insert_policy: Literal["warn", "error"] = Field(
        default="warn",
        description=(
            "Behaviour when a multi-row INSERT meets a single-row dialect: "
            "'warn' logs and serializes anyway, 'error' raises"
        ),
    )

    # Performance reporting
    serialized_query_max_length: int = Field(
        default=1024,
        ge=16,
        description="Maximum length of the serialized query text metric",
    )
    placeholder_collapse_threshold: int = Field(
        default=4,
        ge=1,
        description="Placeholder runs longer than this are collapsed in the query text metric",
    )

    # Connection
    database_url: Optional[str] = Field(
        default=None,
        description="SQLAlchemy database URL used by SQLAlchemyDatabase.from_settings()",
    )
    dialect_profiles_path: Optional[str] = Field(
        default=None,
        description="YAML file declaring custom dialect profiles",
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @field_validator("database_url")
    @classmethod
    def _normalize_database_url(cls, value: Optional[str]) -> Optional[str]:
        """Rewrite the deprecated 'postgres://' scheme for SQLAlchemy."""
        if value and value.startswith("postgres://"):
            return value.replace("postgres://", "postgresql://", 1)
        return value

    def get_database_connection_string(self) -> str:
        """
        Get the configured database URL.

        Raises:
            ValueError: If SQLCRAFT_DATABASE_URL is not set
        """
        if not self.database_url:
            raise ValueError(
                "No database URL configured. Set SQLCRAFT_DATABASE_URL "
                "or pass a connection explicitly."
            )
        return self.database_url


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get the cached application settings.

    Call ``get_settings.cache_clear()`` after changing the environment
    (e.g. in tests) to force a reload.
    """
    settings_instance = Settings()
    logger.debug(
        "configuration.loaded",
        default_dialect=settings_instance.default_dialect,
        multirow_insert_policy=settings_instance.multirow_insert_policy,
    )
    return settings_instance
