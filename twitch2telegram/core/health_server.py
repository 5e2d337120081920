"""HTTP health check server"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

from aiohttp import web

from ..components.poller import PollerState

if TYPE_CHECKING:
    from .context import AppContext

logger = logging.getLogger("Bot.Health")

HEARTBEAT_SECONDS = 300


class HealthCheckServer:
    """HTTP health check server"""

    def __init__(self, context: AppContext, host: str = "0.0.0.0", port: int = 4344) -> None:
        self.context = context
        self.host = host
        self.port = port
        self.app = web.Application()
        self.runner: web.AppRunner | None = None
        self._start_time: float = time.time()
        self._heartbeat_task: asyncio.Task | None = None
        self._setup_routes()

    def _setup_routes(self) -> None:
        """Configure HTTP routes"""
        self.app.router.add_get("/", self.handle_root)
        self.app.router.add_get("/health", self.handle_health)
        self.app.router.add_get("/status", self.handle_status)
        self.app.router.add_get("/ping", self.handle_ping)

    @property
    def ready(self) -> bool:
        return self.context.poller.state is PollerState.POLLING

    async def handle_root(self, request: web.Request) -> web.Response:
        """Root endpoint - minimal service info"""
        return web.json_response({"service": "twitch2telegram", "status": "running"})

    async def handle_health(self, request: web.Request) -> web.Response:
        """Liveness check, always 200"""
        return web.json_response(
            {"status": "healthy" if self.ready else "starting", "ready": self.ready},
        )

    async def handle_status(self, request: web.Request) -> web.Response:
        """Poller and retention state"""
        poller = self.context.poller
        return web.json_response(
            {
                "service": "twitch2telegram",
                "state": poller.state.value,
                "uptime_seconds": int(time.time() - self._start_time),
                "tracked_accounts": len(poller.user_ids),
                "live_accounts": poller.live_count,
                "ticks": poller.ticks,
                "pending_deletions": len(self.context.ledger),
            }
        )

    async def handle_ping(self, request: web.Request) -> web.Response:
        """Ping endpoint"""
        return web.Response(text="pong")

    async def _heartbeat(self) -> None:
        """Periodic heartbeat - log uptime and poller status"""
        while True:
            await asyncio.sleep(HEARTBEAT_SECONDS)
            poller = self.context.poller
            uptime = int(time.time() - self._start_time)
            logger.info(
                f"Heartbeat: uptime={uptime}s, state={poller.state.value}, "
                f"live={poller.live_count}/{len(poller.user_ids)}"
            )

    async def start(self) -> None:
        """Start health check server"""
        try:
            self.runner = web.AppRunner(self.app)
            await self.runner.setup()

            site = web.TCPSite(self.runner, self.host, self.port)
            await site.start()

            self._heartbeat_task = asyncio.create_task(self._heartbeat())

            logger.info(f"Health server started on {self.host}:{self.port}")
            logger.info(f"  GET http://{self.host}:{self.port}/health - Health check")
            logger.info(f"  GET http://{self.host}:{self.port}/status - Detailed status")

        except Exception as e:
            logger.exception(f"Failed to start health server: {e}")
            raise

    async def stop(self) -> None:
        """Stop health check server"""
        if self._heartbeat_task:
            self._heartbeat_task.cancel()
        if self.runner:
            try:
                await self.runner.cleanup()
                logger.info("Health server stopped")
            except Exception as e:
                logger.exception(f"Error stopping health server: {e}")
