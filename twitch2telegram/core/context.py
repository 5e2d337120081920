"""Process-scoped application context"""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from ..components.dispatcher import NotificationDispatcher
from ..components.poller import StreamPoller
from ..components.retention import RetentionLedger
from ..services.telegram_api import TelegramClient
from ..services.twitch_api import AccountResolver, HelixClient, LiveSetTracker
from ..services.twitch_auth import TokenManager
from .config import Settings

HTTP_TIMEOUT_SECONDS = 10.0


@dataclass
class AppContext:
    """Every long-lived object the notifier needs, created at startup."""

    settings: Settings
    http: httpx.AsyncClient
    tokens: TokenManager
    telegram: TelegramClient
    ledger: RetentionLedger
    dispatcher: NotificationDispatcher
    poller: StreamPoller

    async def aclose(self) -> None:
        """Stop the retention loop and close the shared HTTP client."""
        await self.ledger.stop()
        await self.http.aclose()


def build_context(settings: Settings, http: httpx.AsyncClient | None = None) -> AppContext:
    """Wire the components together around one shared HTTP client."""
    if http is None:
        http = httpx.AsyncClient(timeout=HTTP_TIMEOUT_SECONDS)

    tokens = TokenManager(http, settings.twitch_client_id, settings.twitch_client_secret)
    helix = HelixClient(http, tokens)
    telegram = TelegramClient(http, settings.telegram_bot_token)
    ledger = RetentionLedger(telegram, retention_seconds=settings.retention_seconds)
    dispatcher = NotificationDispatcher(telegram, settings.telegram_chat_id, ledger)
    poller = StreamPoller(
        resolver=AccountResolver(helix),
        tracker=LiveSetTracker(helix),
        dispatcher=dispatcher,
        tokens=tokens,
        logins=settings.logins,
        poll_seconds=settings.poll_seconds,
    )

    return AppContext(
        settings=settings,
        http=http,
        tokens=tokens,
        telegram=telegram,
        ledger=ledger,
        dispatcher=dispatcher,
        poller=poller,
    )
