"""Twitch app access token management.

The notifier only calls public Helix endpoints, so a single app access token
(client_credentials grant) is shared by every request. The token is cached
until shortly before it expires and refreshed on demand.
"""

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

import httpx

from ..core.errors import AuthError

logger = logging.getLogger(__name__)

OAUTH_BASE = "https://id.twitch.tv/oauth2"

# Refresh this long before Twitch's stated expiry; also the minimum lifetime
EXPIRY_MARGIN_SECONDS = 300
DEFAULT_EXPIRES_IN = 3600


@dataclass(frozen=True)
class Credential:
    """App access token and the clock reading after which it must be refreshed."""

    token: str
    expires_at: float


class TokenManager:
    """Owns the Helix bearer credential.

    Refreshes are serialized with a lock so concurrent callers waiting on an
    expired token trigger a single token request.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        client_id: str,
        client_secret: str,
        *,
        clock: Callable[[], float] = time.monotonic,
    ):
        if not client_id or not client_secret:
            raise ValueError("Twitch client_id and client_secret are required")

        self._http = http
        self.client_id = client_id
        self._client_secret = client_secret
        self._clock = clock

        self._credential: Credential | None = None
        self._lock = asyncio.Lock()

    @property
    def credential(self) -> Credential | None:
        return self._credential

    def _is_valid(self, credential: Credential) -> bool:
        return self._clock() <= credential.expires_at

    async def ensure_valid_credential(self) -> Credential:
        """Return the cached credential, refreshing only when missing or expired."""
        credential = self._credential
        if credential is not None and self._is_valid(credential):
            return credential

        async with self._lock:
            # Another caller may have refreshed while we waited
            credential = self._credential
            if credential is not None and self._is_valid(credential):
                return credential
            return await self._acquire()

    async def refresh(self) -> Credential:
        """Unconditionally fetch a new credential."""
        async with self._lock:
            return await self._acquire()

    async def headers(self) -> dict[str, str]:
        """Headers required by every Helix request."""
        credential = await self.ensure_valid_credential()
        return {
            "Client-ID": self.client_id,
            "Authorization": f"Bearer {credential.token}",
        }

    async def _acquire(self) -> Credential:
        response = await self._http.post(
            f"{OAUTH_BASE}/token",
            data={
                "client_id": self.client_id,
                "client_secret": self._client_secret,
                "grant_type": "client_credentials",
            },
        )
        if not response.is_success:
            logger.error(f"Failed to get app token: {response.status_code}")
            raise AuthError(response.status_code, response.text)

        data = response.json()
        expires_in = float(data.get("expires_in") or DEFAULT_EXPIRES_IN)
        lifetime = max(expires_in - EXPIRY_MARGIN_SECONDS, EXPIRY_MARGIN_SECONDS)

        self._credential = Credential(
            token=data["access_token"],
            expires_at=self._clock() + lifetime,
        )
        logger.debug(f"App access token refreshed, valid for {lifetime:.0f}s")
        return self._credential
