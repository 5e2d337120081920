"""Core modules: settings, errors, logging."""

from .config import MIN_POLL_SECONDS, Settings, get_settings, load_env_file
from .errors import (
    AuthError,
    ConfigError,
    DeletionError,
    DispatchError,
    NoAccountsResolvedError,
    Twitch2TelegramError,
    UpstreamError,
)
from .logging import setup_logging

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    "load_env_file",
    "MIN_POLL_SECONDS",
    # Errors
    "Twitch2TelegramError",
    "ConfigError",
    "NoAccountsResolvedError",
    "AuthError",
    "UpstreamError",
    "DispatchError",
    "DeletionError",
    # Setup functions
    "setup_logging",
]
