"""Stateful components: poller, dispatcher, retention ledger."""

from .dispatcher import NotificationDispatcher, escape_html, format_caption, render_thumbnail
from .poller import PollerState, StreamPoller
from .retention import RetentionLedger, SentMessageRecord

__all__ = [
    "NotificationDispatcher",
    "PollerState",
    "RetentionLedger",
    "SentMessageRecord",
    "StreamPoller",
    "escape_html",
    "format_caption",
    "render_thumbnail",
]
