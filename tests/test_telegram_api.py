import json

import httpx
import pytest

from twitch2telegram.core.errors import DeletionError, DispatchError
from twitch2telegram.services.telegram_api import TelegramClient


@pytest.fixture
def telegram(http) -> TelegramClient:
    return TelegramClient(http, "123:abc")


async def test_send_photo_posts_html_caption(telegram, backend) -> None:
    message_id = await telegram.send_photo("-100", "https://img/1.jpg", "<b>hi</b>")

    assert message_id == 101
    request = backend.requests[0]
    assert request.url.path == "/bot123:abc/sendPhoto"
    assert json.loads(request.content) == {
        "chat_id": "-100",
        "photo": "https://img/1.jpg",
        "caption": "<b>hi</b>",
        "parse_mode": "HTML",
        "disable_web_page_preview": False,
    }


async def test_send_photo_not_ok_raises(telegram, backend) -> None:
    backend.send_response = httpx.Response(200, json={"ok": False, "description": "chat not found"})

    with pytest.raises(DispatchError, match="chat not found"):
        await telegram.send_photo("-100", "p", "c")


async def test_send_photo_http_error_raises(telegram, backend) -> None:
    backend.send_response = httpx.Response(403, json={"ok": False})

    with pytest.raises(DispatchError):
        await telegram.send_photo("-100", "p", "c")


async def test_send_photo_unparseable_body_raises(telegram, backend) -> None:
    backend.send_response = httpx.Response(502, text="<html>Bad Gateway</html>")

    with pytest.raises(DispatchError, match="parse error"):
        await telegram.send_photo("-100", "p", "c")


async def test_send_photo_without_message_id_returns_none(telegram, backend) -> None:
    backend.send_response = httpx.Response(200, json={"ok": True, "result": {}})

    assert await telegram.send_photo("-100", "p", "c") is None


async def test_send_photo_transport_error_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        with pytest.raises(DispatchError, match="transport"):
            await TelegramClient(http, "t").send_photo("-100", "p", "c")


async def test_delete_message(telegram, backend) -> None:
    await telegram.delete_message("-100", 55)

    assert backend.deleted == [{"chat_id": "-100", "message_id": 55}]


async def test_delete_message_failure_raises(telegram, backend) -> None:
    backend.delete_ok = False

    with pytest.raises(DeletionError, match="delete failed: 400"):
        await telegram.delete_message("-100", 55)


NON_UTF8_GATEWAY_PAGE = b"<html>bad gateway \xe9</html>"


async def test_send_photo_non_utf8_body_raises_dispatch_error(telegram, backend) -> None:
    backend.send_response = httpx.Response(502, content=NON_UTF8_GATEWAY_PAGE)

    with pytest.raises(DispatchError, match="parse error"):
        await telegram.send_photo("-100", "p", "c")


async def test_delete_message_non_utf8_body_raises_deletion_error(telegram, backend) -> None:
    backend.delete_response = httpx.Response(502, content=NON_UTF8_GATEWAY_PAGE)

    with pytest.raises(DeletionError, match="delete failed: 502"):
        await telegram.delete_message("-100", 55)
