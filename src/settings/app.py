"""Application settings powered by Pydantic BaseSettings."""

import logging
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, env_file=".env", env_file_encoding="utf-8"
    )

    feed_config_path: Path | None = Field(
        default=None, validation_alias="FEED_CONFIG_PATH"
    )
    log_level: str = Field(default="INFO", validation_alias="FEED_LOG_LEVEL")
    json_logs: bool = Field(default=True, validation_alias="FEED_JSON_LOGS")
    random_seed: int | None = Field(default=None, validation_alias="FEED_RANDOM_SEED")

    def logging_level(self) -> int:
        """Return the numeric logging level, falling back to INFO."""
        level = logging.getLevelName(self.log_level.upper())
        return level if isinstance(level, int) else logging.INFO


def get_settings() -> AppSettings:
    """Get a settings instance."""
    return AppSettings()
