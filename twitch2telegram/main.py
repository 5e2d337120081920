"""Process entry point: load settings, wire components, poll until signalled."""

import asyncio
import logging
import os
import signal

import httpx

from . import __version__
from .core.config import Settings, get_settings, load_env_file
from .core.context import build_context
from .core.errors import ConfigError
from .core.health_server import HealthCheckServer
from .core.logging import setup_logging

LOGGER: logging.Logger = logging.getLogger("Bot")


def _install_signal_handlers(stop_event: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()

    def _request_stop() -> None:
        if not stop_event.is_set():
            LOGGER.info("Shutting down…")
        stop_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _request_stop)
        except NotImplementedError:
            # Windows event loops: Ctrl+C arrives as KeyboardInterrupt instead
            pass


async def run(
    settings: Settings,
    *,
    stop_event: asyncio.Event | None = None,
    http: httpx.AsyncClient | None = None,
) -> int:
    """Run the notifier until ``stop_event`` is set. Startup errors propagate."""
    stop_event = stop_event or asyncio.Event()
    context = build_context(settings, http)
    health: HealthCheckServer | None = None

    try:
        # Deleting messages in channels requires the bot to be an admin
        context.ledger.start()

        if settings.health_server_enabled:
            health = HealthCheckServer(context, port=settings.port)
            await health.start()

        _install_signal_handlers(stop_event)
        await context.poller.run(stop_event)
    finally:
        if health is not None:
            await health.stop()
        await context.aclose()

    return 0


def main() -> None:
    load_env_file()
    setup_logging(os.getenv("LOG_LEVEL", "INFO"))
    LOGGER.info(f"Starting twitch2telegram {__version__}…")

    try:
        settings = get_settings()
    except ConfigError as e:
        LOGGER.error(str(e))
        raise SystemExit(1) from e

    try:
        exit_code = asyncio.run(run(settings))
    except KeyboardInterrupt:
        LOGGER.warning("Shutting down due to KeyboardInterrupt...")
        exit_code = 0
    except ConfigError as e:
        LOGGER.error(str(e))
        exit_code = 1
    except Exception as e:
        LOGGER.exception(f"Fatal startup error: {e}")
        exit_code = 1

    if exit_code:
        raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
