"""Twitch live notifications for Telegram."""

__version__ = "1.0.0"
