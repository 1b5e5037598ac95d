"""
Heartbeat Module

The process's own background liveness loop. Ticks every 2 seconds
until the stop signal fires. A tick only updates bookkeeping; nothing
leaves the process.
"""

import asyncio
from datetime import datetime, timezone

from healthping.common.logging_setup import get_service_logger
from healthping.common.stop_signal import StopSignal

logger = get_service_logger("listener.heartbeat")

HEARTBEAT_INTERVAL_SECONDS = 2.0


class HeartbeatTimer:
    """Periodic ticker stopped by a StopSignal"""

    def __init__(
        self,
        stop_signal: StopSignal,
        interval_seconds: float = HEARTBEAT_INTERVAL_SECONDS,
    ):
        self.stop_signal = stop_signal
        self.interval_seconds = interval_seconds

        self.tick_count = 0
        self.last_tick_at: datetime | None = None
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    async def run(self) -> None:
        """Tick until the stop signal fires, then return"""
        self._running = True
        logger.info(f"Starting Health Ping (interval: {self.interval_seconds}s)")

        try:
            while True:
                try:
                    await asyncio.wait_for(self.stop_signal.wait(), timeout=self.interval_seconds)
                except asyncio.TimeoutError:
                    self._tick()
                    continue

                logger.info(
                    "Stopped health pings",
                    extra={"ticks": self.tick_count},
                )
                return
        finally:
            self._running = False

    def _tick(self) -> None:
        self.tick_count += 1
        self.last_tick_at = datetime.now(timezone.utc)
        logger.debug(f"Health ping #{self.tick_count}")
