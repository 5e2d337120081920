"""Notification dispatcher: formats a go-live message and posts it to Telegram."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from ..core.errors import DispatchError
from ..services.telegram_api import TelegramClient
from ..services.twitch_api import StreamSnapshot
from .retention import RetentionLedger, SentMessageRecord

LOGGER = logging.getLogger("Dispatcher")

THUMBNAIL_WIDTH = 640
THUMBNAIL_HEIGHT = 360

CAPTION_TEMPLATE = (
    "🔴 {user_name} is live!\n"
    "🎮 {game_name}\n"
    "📝 {title}\n"
    "▶️ Watch here https://twitch.tv/{user_login}"
)


def escape_html(text: object) -> str:
    """Escape HTML special characters for Telegram's HTML parse mode."""
    return str(text).replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def render_thumbnail(template: str) -> str:
    return template.replace("{width}", str(THUMBNAIL_WIDTH)).replace(
        "{height}", str(THUMBNAIL_HEIGHT)
    )


def format_caption(snapshot: StreamSnapshot) -> str:
    return CAPTION_TEMPLATE.format(
        user_name=escape_html(snapshot.user_name),
        game_name=escape_html(snapshot.game_name),
        title=escape_html(snapshot.title),
        user_login=snapshot.user_login,
    )


class NotificationDispatcher:
    """Sends one notification per live transition and records it for deletion."""

    def __init__(
        self,
        telegram: TelegramClient,
        chat_id: str,
        ledger: RetentionLedger,
        *,
        disable_preview: bool = False,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._telegram = telegram
        self.chat_id = chat_id
        self._ledger = ledger
        self._disable_preview = disable_preview
        self._clock = clock

    async def dispatch(self, snapshot: StreamSnapshot) -> int | None:
        """Post the go-live message. Returns the Telegram message id, or None on failure.

        Failures are logged and dropped; the transition is not retried.
        """
        try:
            message_id = await self._telegram.send_photo(
                self.chat_id,
                render_thumbnail(snapshot.thumbnail_url),
                format_caption(snapshot),
                disable_web_page_preview=self._disable_preview,
            )
        except DispatchError as e:
            LOGGER.error(f"Notification for {snapshot.user_login} failed: {e}")
            return None

        if message_id is None:
            LOGGER.warning(
                f"Telegram accepted notification for {snapshot.user_login} without a message_id"
            )
            return None

        self._ledger.record(
            SentMessageRecord(chat_id=self.chat_id, message_id=message_id, sent_at=self._clock())
        )
        LOGGER.info(f"Notified: {snapshot.user_login} is live ({snapshot.game_name})")
        return message_id
