"""Stream poller: detects offline-to-live transitions and triggers notifications."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from enum import Enum

import httpx

from ..core.config import MIN_POLL_SECONDS
from ..core.errors import AuthError, ConfigError, NoAccountsResolvedError, UpstreamError
from ..services.twitch_api import AccountResolver, LiveSetTracker
from ..services.twitch_auth import TokenManager
from .dispatcher import NotificationDispatcher

LOGGER = logging.getLogger("Poller")

# Errors that abort a single tick but never the process
RECOVERABLE_ERRORS = (UpstreamError, AuthError, httpx.HTTPError)


class PollerState(str, Enum):
    INITIALIZING = "initializing"
    RESOLVING = "resolving"
    POLLING = "polling"
    STOPPED = "stopped"


class StreamPoller:
    """Polls Helix on a fixed interval and notifies on each live transition.

    ``was_live`` holds the live flag of every tracked user ID as of the last
    completed fetch. It is updated every tick whether or not the notification
    went out, so a stream is announced at most once per live session.
    """

    def __init__(
        self,
        *,
        resolver: AccountResolver,
        tracker: LiveSetTracker,
        dispatcher: NotificationDispatcher,
        tokens: TokenManager,
        logins: Sequence[str],
        poll_seconds: float,
    ) -> None:
        self._resolver = resolver
        self._tracker = tracker
        self._dispatcher = dispatcher
        self._tokens = tokens
        self.logins = list(logins)
        self.interval = max(MIN_POLL_SECONDS, poll_seconds)

        self.state = PollerState.INITIALIZING
        self.login_to_id: dict[str, str] = {}
        self.was_live: dict[str, bool] = {}
        self.ticks = 0

    @property
    def user_ids(self) -> list[str]:
        return list(self.was_live)

    @property
    def live_count(self) -> int:
        return sum(self.was_live.values())

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        """Resolve configured logins once. Errors here are fatal."""
        self.state = PollerState.INITIALIZING
        if not self.logins:
            raise ConfigError("No valid Twitch logins in TWITCH_LOGINS.")

        self.state = PollerState.RESOLVING
        self.login_to_id = await self._resolver.resolve(self.logins)
        ids = list(dict.fromkeys(self.login_to_id.values()))
        if not ids:
            raise NoAccountsResolvedError(
                "Could not resolve any Twitch user IDs. Check TWITCH_LOGINS and API credentials."
            )

        self.was_live = {uid: False for uid in ids}
        self.state = PollerState.POLLING
        LOGGER.info(f"Tracking {len(ids)} Twitch accounts: {', '.join(self.login_to_id)}")

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    async def tick(self) -> list[str]:
        """Run one fetch-compare-dispatch cycle. Returns the user IDs that went live."""
        self.ticks += 1
        try:
            live_now = await self._tracker.fetch_live_set(self.user_ids)
        except RECOVERABLE_ERRORS as e:
            # Common reasons: network hiccup, expired token, invalid credentials
            LOGGER.error(f"Loop error: {e}")
            await self._refresh_credentials()
            return []

        went_live = []
        for uid in self.user_ids:
            snapshot = live_now.get(uid)
            is_live = snapshot is not None
            if snapshot is not None and not self.was_live[uid]:
                went_live.append(uid)
                try:
                    await self._dispatcher.dispatch(snapshot)
                except Exception as e:
                    LOGGER.exception(f"Dispatch for {uid} raised: {e}")
            self.was_live[uid] = is_live
        return went_live

    async def _refresh_credentials(self) -> None:
        try:
            await self._tokens.refresh()
        except RECOVERABLE_ERRORS as e:
            LOGGER.error(f"Token refresh error: {e}")

    async def run(self, stop_event: asyncio.Event) -> None:
        """Resolve accounts, then tick until ``stop_event`` is set.

        A tick in progress always completes; the wait between ticks ends early
        when stop is requested.
        """
        try:
            await self.initialize()
            LOGGER.info(f"Polling every {self.interval:.0f}s")

            while not stop_event.is_set():
                try:
                    await self.tick()
                except Exception as e:
                    LOGGER.exception(f"Unexpected loop error: {e}")
                    await self._refresh_credentials()

                try:
                    await asyncio.wait_for(stop_event.wait(), timeout=self.interval)
                except asyncio.TimeoutError:
                    pass
        finally:
            self.state = PollerState.STOPPED
