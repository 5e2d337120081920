"""Notifier configuration using Pydantic Settings"""

import logging
import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigError

logger = logging.getLogger(__name__)

MIN_POLL_SECONDS = 5.0
DEFAULT_RETENTION_SECONDS = 3 * 60 * 60

# Hosted deployments inject env vars directly; .env is only for local runs
HOSTED_ENV_MARKERS = ("RAILWAY_ENVIRONMENT", "RAILWAY_PROJECT_ID")


class Settings(BaseSettings):
    """Notifier settings with environment variable support"""

    model_config = SettingsConfigDict(
        case_sensitive=False,
        extra="ignore",
    )

    # Telegram
    telegram_bot_token: str = Field(..., description="Bot token from @BotFather")
    telegram_chat_id: str = Field(..., description="Target chat ID or @channel_username")

    # Twitch application
    twitch_client_id: str = Field(..., description="Twitch app Client ID")
    twitch_client_secret: str = Field(..., description="Twitch app Client Secret")
    twitch_logins: str = Field(..., description="Comma-separated Twitch logins")

    # Scheduling
    poll_seconds: float = Field(default=60.0, description="Poll interval in seconds")
    retention_seconds: float = Field(
        default=DEFAULT_RETENTION_SECONDS,
        description="Age after which sent notifications are deleted",
    )

    # Environment
    log_level: str = Field(default="INFO", description="Logging level")

    # Health server (hosted deployments)
    health_server_enabled: bool = Field(default=False, description="Serve /health and /status")
    port: int = Field(default=4344, description="Health server port")

    @field_validator(
        "telegram_bot_token",
        "telegram_chat_id",
        "twitch_client_id",
        "twitch_client_secret",
        "twitch_logins",
    )
    @classmethod
    def validate_required(cls, v: str) -> str:
        """Reject blank values for required settings"""
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("poll_seconds")
    @classmethod
    def floor_poll_seconds(cls, v: float) -> float:
        """Never poll more often than every 5 seconds"""
        return max(MIN_POLL_SECONDS, v)

    @field_validator("retention_seconds")
    @classmethod
    def validate_retention(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be positive")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid logging level"""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            logger.warning(f"Invalid log level '{v}', defaulting to INFO")
            return "INFO"
        return v_upper

    @property
    def logins(self) -> list[str]:
        """Configured logins, lower-cased, blanks removed"""
        return [s.strip().lower() for s in self.twitch_logins.split(",") if s.strip()]


def load_env_file() -> bool:
    """Load .env from the working directory unless running on a hosted platform."""
    if any(os.getenv(marker) for marker in HOSTED_ENV_MARKERS):
        return False
    return load_dotenv()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance, raising ConfigError on invalid environment"""
    try:
        return Settings()  # type: ignore[call-arg]
    except ValidationError as e:
        problems = []
        for error in e.errors():
            name = str(error["loc"][0]).upper() if error["loc"] else "?"
            if error["type"] == "missing":
                problems.append(f"Missing required env: {name}")
            else:
                problems.append(f"Invalid env {name}: {error['msg']}")
        raise ConfigError("\n".join(problems)) from e
