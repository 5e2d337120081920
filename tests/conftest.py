"""Shared fixtures: fake Twitch/Telegram backends behind httpx.MockTransport."""

from __future__ import annotations

import json
from collections.abc import Iterator

import httpx
import pytest

from twitch2telegram.core.config import Settings, get_settings


class FakeClock:
    """Manually advanced clock usable wherever a ``time.time``-style callable is expected."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeBackend:
    """Answers Twitch OAuth, Helix and Telegram Bot API requests from in-memory data."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        # login -> user id
        self.users: dict[str, str] = {}
        # user id -> Helix stream object
        self.streams: dict[str, dict] = {}
        self.token_status = 200
        self.token_expires_in: int | None = 3600
        self.users_status = 200
        self.streams_status = 200
        self.tokens_issued = 0
        self.next_message_id = 100
        self.send_response: httpx.Response | None = None
        self.delete_ok = True
        self.delete_response: httpx.Response | None = None
        self.streams_response: httpx.Response | None = None
        self.sent: list[dict] = []
        self.deleted: list[dict] = []

    # ------------------------------------------------------------------

    def requests_to(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith(path)]

    def add_stream(self, user_id: str, login: str, **overrides) -> dict:
        stream = {
            "user_id": user_id,
            "user_name": login.capitalize(),
            "user_login": login,
            "title": f"{login} stream",
            "game_name": "Just Chatting",
            "viewer_count": 42,
            "started_at": "2026-01-01T00:00:00Z",
            "thumbnail_url": f"https://cdn.example/{login}-{{width}}x{{height}}.jpg",
        }
        stream.update(overrides)
        self.streams[user_id] = stream
        return stream

    # ------------------------------------------------------------------

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host, path = request.url.host, request.url.path

        if host == "id.twitch.tv" and path == "/oauth2/token":
            if self.token_status != 200:
                return httpx.Response(self.token_status, text="invalid client")
            self.tokens_issued += 1
            body: dict = {"access_token": f"token-{self.tokens_issued}", "token_type": "bearer"}
            if self.token_expires_in is not None:
                body["expires_in"] = self.token_expires_in
            return httpx.Response(200, json=body)

        if host == "api.twitch.tv" and path == "/helix/users":
            if self.users_status != 200:
                return httpx.Response(self.users_status, text="users unavailable")
            logins = request.url.params.get_list("login")
            data = [
                {"id": self.users[login], "login": login}
                for login in logins
                if login in self.users
            ]
            return httpx.Response(200, json={"data": data})

        if host == "api.twitch.tv" and path == "/helix/streams":
            if self.streams_status != 200:
                return httpx.Response(self.streams_status, text="streams unavailable")
            if self.streams_response is not None:
                return self.streams_response
            ids = request.url.params.get_list("user_id")
            data = [self.streams[uid] for uid in ids if uid in self.streams]
            return httpx.Response(200, json={"data": data})

        if host == "api.telegram.org" and path.endswith("/sendPhoto"):
            payload = json.loads(request.content)
            if self.send_response is not None:
                return self.send_response
            self.sent.append(payload)
            self.next_message_id += 1
            return httpx.Response(
                200, json={"ok": True, "result": {"message_id": self.next_message_id}}
            )

        if host == "api.telegram.org" and path.endswith("/deleteMessage"):
            payload = json.loads(request.content)
            if self.delete_response is not None:
                # Fresh copy per request, several deletes may share it
                return httpx.Response(
                    self.delete_response.status_code, content=self.delete_response.content
                )
            if not self.delete_ok:
                return httpx.Response(
                    400, json={"ok": False, "description": "message can't be deleted"}
                )
            self.deleted.append(payload)
            return httpx.Response(200, json={"ok": True, "result": True})

        return httpx.Response(404, text=f"unexpected {request.method} {request.url}")


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
async def http(backend: FakeBackend):
    client = httpx.AsyncClient(transport=httpx.MockTransport(backend))
    yield client
    await client.aclose()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        telegram_bot_token="123:abc",
        telegram_chat_id="-100200300",
        twitch_client_id="client-id",
        twitch_client_secret="client-secret",
        twitch_logins="alice,bob",
        poll_seconds=60,
    )


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> Iterator[None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
