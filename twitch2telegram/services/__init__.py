"""External API clients: Twitch Helix and Telegram Bot API."""

from .telegram_api import TelegramClient
from .twitch_api import AccountResolver, HelixClient, LiveSetTracker, StreamSnapshot
from .twitch_auth import Credential, TokenManager

__all__ = [
    "AccountResolver",
    "Credential",
    "HelixClient",
    "LiveSetTracker",
    "StreamSnapshot",
    "TelegramClient",
    "TokenManager",
]
