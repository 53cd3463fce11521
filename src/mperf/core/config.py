"""Configuration management for mperf."""

from typing import Any, Literal

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from mperf.exceptions import ConfigurationError


class Settings(BaseSettings):
    """Run settings loaded from environment variables and CLI overrides."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    SERVICE_NAME: str = "mperf"

    # Run options
    OBJECT_SIZE_MB: int = Field(default=5, ge=1, le=5120)
    PARENT_DIR: str = Field(default="stor/mperf", min_length=1)
    MAX_OUTSTANDING: int = Field(default=20, ge=1, le=500)
    INTERVAL_MS: int = Field(default=500, ge=100, le=10000)

    # Upload payload
    CONTENT_TYPE: str = "text/plain"
    CHUNK_SIZE_BYTES: int = Field(default=65536, ge=1)  # 64KB chunks

    # Storage Configuration
    STORAGE_BACKEND: Literal["local", "gcs"] = "local"
    LOCAL_ROOT: str = "./data/mperf"
    GCS_BUCKET_NAME: str = ""
    GCP_PROJECT_ID: str = ""

    # Logging
    LOG_LEVEL: str = "DEBUG"
    LOG_FORMAT: Literal["text", "json"] = "text"
    STATS_INTERVAL_TICKS: int = Field(default=100, ge=1)

    @property
    def object_size_bytes(self) -> int:
        """Convert OBJECT_SIZE_MB to bytes."""
        return self.OBJECT_SIZE_MB * 1024 * 1024

    @property
    def tick_interval_seconds(self) -> float:
        """Convert INTERVAL_MS to seconds."""
        return self.INTERVAL_MS / 1000


# Human-readable names for run options, used in usage errors
_OPTION_NAMES = {
    "OBJECT_SIZE_MB": "object size",
    "PARENT_DIR": "parent directory",
    "MAX_OUTSTANDING": "outstanding requests",
    "INTERVAL_MS": "req interval",
}


def load_settings(**overrides: Any) -> Settings:
    """Build settings from the environment, with explicit overrides on top.

    Overrides whose value is None are ignored so unset CLI flags fall back
    to the environment and then to the defaults.

    Raises:
        ConfigurationError: If any value fails validation
    """
    values = {key: value for key, value in overrides.items() if value is not None}
    try:
        return Settings(**values)
    except ValidationError as e:
        problems = []
        for err in e.errors():
            field = str(err["loc"][0]) if err["loc"] else "settings"
            problems.append(f"{_OPTION_NAMES.get(field, field)}: {err['msg']}")
        raise ConfigurationError("; ".join(problems)) from e
