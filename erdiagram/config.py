"""
Settings for the server and the CLI.

Every field can be overridden by an environment variable named
ERDIAGRAM_<FIELD>, e.g. ERDIAGRAM_PORT=9000.
"""

import logging
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PREFIX = "ERDIAGRAM_"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Runtime configuration read from the environment."""
    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, env_ignore_empty=True)

    host: str = "127.0.0.1"
    port: int = Field(default=8765, gt=0, lt=65536)
    width: float = Field(default=960, gt=0)   # Default host width in pixels
    height: float = Field(default=640, gt=0)  # Default host height in pixels
    seed: Optional[int] = None                # Shuffle seed, random if unset
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {value}")
        return level


def get_settings() -> Settings:
    """Read settings from the environment."""
    return Settings()


def configure_logging(level: str):
    """Configure root logging once for the CLI and the server."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
