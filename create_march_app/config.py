"""
Runtime Settings
================

Settings that tune how the scaffolder runs (not what it scaffolds).

Values come from environment variables prefixed with ``MARCH_`` or from a
``.env`` file in the working directory, e.g.::

    MARCH_LOG_LEVEL=DEBUG
    MARCH_INSTALL_TIMEOUT=300
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .answers import PackageManager


class Settings(BaseSettings):
    """Runtime settings for a scaffolding run."""

    model_config = SettingsConfigDict(
        env_prefix="MARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"
    structured_logs: bool = False
    log_file: str | None = None

    # Child process timeouts, in seconds
    install_timeout: float = Field(default=180.0, gt=0)
    generator_timeout: float = Field(default=300.0, gt=0)

    app_dir_name: str = "web"
    backend_dir_name: str = "api"
    # Preselected answer for the package manager question and answers files
    default_package_manager: PackageManager = PackageManager.BUN

    @field_validator("log_level")
    @classmethod
    def normalise_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return level


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings for this process."""
    return Settings()
