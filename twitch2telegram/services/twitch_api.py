"""Twitch Helix lookups: login resolution and live stream polling."""

import logging
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import Any

import httpx

from ..core.errors import UpstreamError
from .twitch_auth import TokenManager

logger = logging.getLogger(__name__)

HELIX_BASE = "https://api.twitch.tv/helix"

# Helix accepts at most 100 repeated query parameters per request
MAX_BATCH_SIZE = 100


def batched(items: Sequence[str], size: int = MAX_BATCH_SIZE) -> Iterator[Sequence[str]]:
    for start in range(0, len(items), size):
        yield items[start : start + size]


@dataclass(frozen=True)
class StreamSnapshot:
    """A live stream as reported by ``GET /helix/streams``."""

    user_id: str
    user_name: str
    user_login: str
    title: str
    game_name: str
    viewer_count: int
    started_at: str
    thumbnail_url: str

    @classmethod
    def from_helix(cls, data: dict[str, Any]) -> "StreamSnapshot":
        return cls(
            user_id=str(data["user_id"]),
            user_name=data.get("user_name") or "",
            user_login=data.get("user_login") or "",
            title=data.get("title") or "",
            game_name=data.get("game_name") or "",
            viewer_count=int(data.get("viewer_count") or 0),
            started_at=data.get("started_at") or "",
            thumbnail_url=data.get("thumbnail_url") or "",
        )


class HelixClient:
    """Authenticated GET requests against the Helix API."""

    def __init__(self, http: httpx.AsyncClient, tokens: TokenManager):
        self._http = http
        self.tokens = tokens

    async def get_data(self, path: str, params: list[tuple[str, str]]) -> list[dict]:
        """GET ``/helix/<path>`` and return its ``data`` array."""
        response = await self._http.get(
            f"{HELIX_BASE}/{path}",
            params=params,
            headers=await self.tokens.headers(),
        )
        if not response.is_success:
            logger.error(f"Helix GET /{path} failed: {response.status_code}")
            raise UpstreamError(path, response.status_code, response.text)

        try:
            payload = response.json()
        except ValueError:
            payload = None
        if not isinstance(payload, dict):
            logger.error(f"Helix GET /{path} returned an unexpected body")
            raise UpstreamError(path, response.status_code, response.text)

        return payload.get("data") or []


class AccountResolver:
    """Translates login names to stable Twitch user IDs."""

    def __init__(self, helix: HelixClient):
        self._helix = helix

    async def resolve(self, logins: Iterable[str]) -> dict[str, str]:
        """Return ``{login_lower: user_id}`` for every login Twitch knows.

        Unknown logins are left out. Any failed batch aborts the whole call.
        """
        unique = list(dict.fromkeys(login.strip().lower() for login in logins if login.strip()))
        resolved: dict[str, str] = {}

        for batch in batched(unique):
            users = await self._helix.get_data("users", [("login", login) for login in batch])
            for user in users:
                resolved[str(user["login"]).lower()] = str(user["id"])

        missing = [login for login in unique if login not in resolved]
        if missing:
            logger.warning(f"Unknown Twitch logins skipped: {', '.join(missing)}")
        return resolved


class LiveSetTracker:
    """Reports which tracked accounts are currently live."""

    def __init__(self, helix: HelixClient):
        self._helix = helix

    async def fetch_live_set(self, user_ids: Sequence[str]) -> dict[str, StreamSnapshot]:
        """Return ``{user_id: snapshot}`` for live accounts only."""
        live: dict[str, StreamSnapshot] = {}
        if not user_ids:
            return live

        for batch in batched(user_ids):
            streams = await self._helix.get_data("streams", [("user_id", uid) for uid in batch])
            for stream in streams:
                snapshot = StreamSnapshot.from_helix(stream)
                live[snapshot.user_id] = snapshot
        return live
