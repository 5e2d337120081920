"""Retention ledger: deletes the bot's own notifications once they age out."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

import httpx

from ..core.errors import DeletionError
from ..services.telegram_api import TelegramClient

LOGGER = logging.getLogger("Retention")

RETENTION_SECONDS = 3 * 60 * 60


@dataclass(frozen=True)
class SentMessageRecord:
    """A notification the bot sent and will later delete."""

    chat_id: str
    message_id: int
    sent_at: float


class RetentionLedger:
    """Ordered record of sent notifications plus a periodic deletion sweep.

    Each expired record gets exactly one deletion attempt. It is dropped from
    the ledger afterwards even if Telegram refused the delete, so a failed
    deletion leaves the message in the chat for good.
    """

    def __init__(
        self,
        telegram: TelegramClient,
        *,
        retention_seconds: float = RETENTION_SECONDS,
        sweep_interval: float | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._telegram = telegram
        self.retention_seconds = retention_seconds
        self.sweep_interval = sweep_interval if sweep_interval is not None else retention_seconds
        self._clock = clock
        self._records: list[SentMessageRecord] = []
        self._task: asyncio.Task | None = None

    def __len__(self) -> int:
        return len(self._records)

    @property
    def records(self) -> list[SentMessageRecord]:
        return list(self._records)

    def record(self, entry: SentMessageRecord) -> None:
        self._records.append(entry)

    async def sweep(self, now: float | None = None) -> int:
        """Delete every record sent at or before ``now - retention``.

        Returns the number of records removed from the ledger.
        """
        if now is None:
            now = self._clock()
        cutoff = now - self.retention_seconds
        expired = [r for r in self._records if r.sent_at <= cutoff]
        if not expired:
            return 0

        deleted = 0
        try:
            for entry in expired:
                try:
                    await self._telegram.delete_message(entry.chat_id, entry.message_id)
                    deleted += 1
                except (DeletionError, httpx.HTTPError) as e:
                    LOGGER.error(
                        f"Telegram deleteMessage error (chat={entry.chat_id}, id={entry.message_id}): {e}"
                    )
        finally:
            # Dropped whether or not the delete went through
            done = set(expired)
            self._records = [r for r in self._records if r not in done]

        LOGGER.info(f"Retention sweep: {deleted}/{len(expired)} expired notifications deleted")
        return len(expired)

    # ------------------------------------------------------------------
    # Background loop
    # ------------------------------------------------------------------

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval)
            try:
                await self.sweep()
            except Exception as e:
                LOGGER.exception(f"Retention sweep failed: {e}")

    def start(self) -> asyncio.Task:
        """Schedule the periodic sweep and return its task handle."""
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._sweep_loop(), name="retention-sweep")
            LOGGER.info(
                f"Retention loop started: every {self.sweep_interval:.0f}s, "
                f"window {self.retention_seconds:.0f}s"
            )
        return self._task

    async def stop(self) -> None:
        """Cancel the periodic sweep if it is running."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
