"""Error types shared across the notifier"""


class Twitch2TelegramError(Exception):
    """Base class for all notifier errors."""


class ConfigError(Twitch2TelegramError):
    """Configuration is missing or invalid. Fatal at startup."""


class NoAccountsResolvedError(ConfigError):
    """None of the configured logins resolved to a Twitch user ID."""


class _HTTPStatusError(Twitch2TelegramError):
    def __init__(self, message: str, status: int, body: str = "") -> None:
        super().__init__(f"{message}: {status} {body}".rstrip())
        self.status = status
        self.body = body


class AuthError(_HTTPStatusError):
    """App access token acquisition failed."""

    def __init__(self, status: int, body: str = "") -> None:
        super().__init__("Twitch token error", status, body)


class UpstreamError(_HTTPStatusError):
    """A Helix lookup returned a non-success status."""

    def __init__(self, endpoint: str, status: int, body: str = "") -> None:
        super().__init__(f"{endpoint} error", status, body)
        self.endpoint = endpoint


class DispatchError(Twitch2TelegramError):
    """Telegram rejected or failed a notification send."""


class DeletionError(Twitch2TelegramError):
    """Telegram rejected or failed a message deletion."""
