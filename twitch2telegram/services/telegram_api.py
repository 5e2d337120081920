"""Telegram Bot API client service"""

import json
import logging

import httpx

from ..core.errors import DeletionError, DispatchError

logger = logging.getLogger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org"


class TelegramClient:
    """Client for the two Bot API methods the notifier needs."""

    def __init__(self, http: httpx.AsyncClient, bot_token: str):
        if not bot_token:
            raise ValueError("Telegram bot_token is required")

        self._http = http
        self._base_url = f"{TELEGRAM_API_URL}/bot{bot_token}"

    async def _call(self, method: str, payload: dict) -> tuple[httpx.Response, dict | None]:
        response = await self._http.post(f"{self._base_url}/{method}", json=payload)
        try:
            data = response.json()
        except ValueError:
            # Not JSON, or not even UTF-8 (proxy error pages)
            data = None
        return response, data if isinstance(data, dict) else None

    async def send_photo(
        self,
        chat_id: str,
        photo: str,
        caption: str,
        *,
        parse_mode: str = "HTML",
        disable_web_page_preview: bool = False,
    ) -> int | None:
        """Send a photo with caption. Returns Telegram's ``message_id`` if present.

        Raises:
            DispatchError: transport failure, non-2xx, ``ok: false`` or a body
                that is not JSON.
        """
        try:
            response, data = await self._call(
                "sendPhoto",
                {
                    "chat_id": chat_id,
                    "photo": photo,
                    "caption": caption,
                    "parse_mode": parse_mode,
                    "disable_web_page_preview": disable_web_page_preview,
                },
            )
        except httpx.HTTPError as e:
            raise DispatchError(f"Telegram sendPhoto transport error: {e}") from e

        if data is None:
            raise DispatchError(f"Telegram parse error: {response.text}")
        if not response.is_success or data.get("ok") is False:
            raise DispatchError(f"Telegram error: {response.status_code} {response.text}")

        result = data.get("result") or {}
        return result.get("message_id")

    async def delete_message(self, chat_id: str, message_id: int) -> None:
        """Delete a message previously sent by the bot.

        Deleting in channels requires the bot to be an admin there.

        Raises:
            DeletionError: transport failure or a not-ok acknowledgment.
        """
        try:
            response, data = await self._call(
                "deleteMessage", {"chat_id": chat_id, "message_id": message_id}
            )
        except httpx.HTTPError as e:
            raise DeletionError(f"delete failed: {e}") from e

        if not response.is_success or data is None or data.get("ok") is False:
            raise DeletionError(f"delete failed: {response.status_code} {json.dumps(data)}")
