"""
Listener Service

Wires the UDP command channel, the command dispatcher, the heartbeat
and the shutdown signal watcher together:

- Heartbeat ticks in the background until marked unhealthy
- Signal watcher exits the process on SIGINT/SIGTERM
- Dispatcher serves UDP commands in the foreground
- Optional HTTP health endpoint reports the heartbeat state
"""

import asyncio
import sys
import time
from datetime import datetime, timezone
from typing import Callable

from aiohttp import web

from healthping.common.config import ListenerConfig
from healthping.common.logging_setup import get_service_logger
from healthping.common.stop_signal import StopSignal

from .channel import CommandChannel
from .dispatcher import CommandDispatcher
from .heartbeat import HeartbeatTimer, HEARTBEAT_INTERVAL_SECONDS
from .shutdown_watcher import ShutdownSignalWatcher

logger = get_service_logger("listener")


class ListenerService:
    """
    UDP liveness/control listener.

    Three concurrent units share one event loop:
    - ShutdownSignalWatcher (task)
    - HeartbeatTimer (task)
    - CommandDispatcher (foreground)
    """

    def __init__(
        self,
        config: ListenerConfig,
        terminate: Callable[[int], None] = sys.exit,
        heartbeat_interval: float = HEARTBEAT_INTERVAL_SECONDS,
    ):
        self.config = config

        self.stop_signal = StopSignal("heartbeat")
        self.channel = CommandChannel(config.port, config.host)
        self.heartbeat = HeartbeatTimer(self.stop_signal, interval_seconds=heartbeat_interval)
        self.dispatcher = CommandDispatcher(self.channel, self.stop_signal, terminate=terminate)
        self.shutdown_watcher = ShutdownSignalWatcher(terminate=terminate)

        self._tasks: list[asyncio.Task] = []
        self._started_at: float | None = None

        # Health server
        self._health_runner: web.AppRunner | None = None

    @property
    def is_healthy(self) -> bool:
        return not self.stop_signal.is_fired

    async def run(self) -> None:
        """Start everything and serve commands until terminated"""
        logger.info("Starting Listener Service")
        self._started_at = time.monotonic()

        self.shutdown_watcher.install()
        self._tasks.append(asyncio.create_task(self.shutdown_watcher.watch(), name="shutdown-watcher"))
        self._tasks.append(asyncio.create_task(self.heartbeat.run(), name="heartbeat"))

        self.channel.open()

        if self.config.health_port is not None:
            await self._start_health_server()

        await self.dispatcher.run()

    async def stop(self) -> None:
        """Release everything that was started; safe after a partial start"""
        for task in self._tasks:
            if not task.done():
                task.cancel()
        # A finished watcher task may hold SystemExit; collect, don't re-raise
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()

        await self._stop_health_server()
        self.shutdown_watcher.uninstall()
        self.channel.close()

        logger.info("Listener Service stopped")

    async def _start_health_server(self) -> None:
        """Start the health check HTTP server"""
        app = web.Application()
        app.router.add_get("/health", self._health_handler)

        self._health_runner = web.AppRunner(app)
        await self._health_runner.setup()

        site = web.TCPSite(self._health_runner, "127.0.0.1", self.config.health_port)
        await site.start()

        logger.info(f"Health server started on port {self.config.health_port}")

    async def _stop_health_server(self) -> None:
        """Stop the health check HTTP server"""
        if self._health_runner:
            await self._health_runner.cleanup()
            self._health_runner = None

    def health_payload(self) -> dict:
        """Snapshot of listener state for the health endpoint"""
        uptime = 0 if self._started_at is None else int(time.monotonic() - self._started_at)
        last_tick = self.heartbeat.last_tick_at
        unhealthy_since = self.stop_signal.fired_at

        return {
            "status": "healthy" if self.is_healthy else "unhealthy",
            "unhealthy_since": unhealthy_since.isoformat() if unhealthy_since else None,
            "service": "listener",
            "uptime": uptime,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "udp_port": self.channel.bound_port,
            "commands_received": self.dispatcher.commands_received,
            "components": {
                "heartbeat": "running" if self.heartbeat.is_running else "stopped",
                "dispatcher": self.dispatcher.state.value,
            },
            "heartbeat": {
                "ticks": self.heartbeat.tick_count,
                "last_tick": last_tick.isoformat() if last_tick else None,
            },
        }

    async def _health_handler(self, request: web.Request) -> web.Response:
        """Handle health check requests"""
        return web.json_response(self.health_payload())
