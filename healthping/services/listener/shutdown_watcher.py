"""
Shutdown Signal Watcher

Exits the process with status 0 on SIGINT or SIGTERM. No cleanup is
attempted here; ending the process is the cleanup.
"""

import asyncio
import signal
import sys
from typing import Callable

from healthping.common.logging_setup import get_service_logger

logger = get_service_logger("listener.signals")

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class ShutdownSignalWatcher:
    """Waits for the first OS termination request and exits"""

    def __init__(self, terminate: Callable[[int], None] = sys.exit):
        self._terminate = terminate
        self._received = asyncio.Event()
        self._signum: int | None = None
        self._installed = False
        self._loop: asyncio.AbstractEventLoop | None = None
        self._fallback: dict[int, object] = {}

    @property
    def received_signal(self) -> int | None:
        return self._signum

    def install(self) -> None:
        """Register SIGINT/SIGTERM handlers on the running loop (once)"""
        if self._installed:
            logger.warning("Signal handlers already installed")
            return

        loop = asyncio.get_running_loop()
        self._loop = loop

        for sig in SHUTDOWN_SIGNALS:
            try:
                loop.add_signal_handler(sig, self._on_signal, sig)
            except NotImplementedError:
                # Windows doesn't support add_signal_handler
                self._fallback[sig] = signal.signal(
                    sig, lambda s, f: loop.call_soon_threadsafe(self._on_signal, s)
                )

        self._installed = True

    def uninstall(self) -> None:
        """Restore default handling for the watched signals"""
        if not self._installed or self._loop is None:
            return

        for sig in SHUTDOWN_SIGNALS:
            if sig in self._fallback:
                signal.signal(sig, self._fallback.pop(sig))
            elif not self._loop.is_closed():
                self._loop.remove_signal_handler(sig)

        self._installed = False

    def _on_signal(self, signum: int) -> None:
        # Only the first delivery matters
        if self._received.is_set():
            return
        self._signum = signum
        self._received.set()

    async def watch(self) -> None:
        """Block until a termination signal arrives, then exit the process"""
        await self._received.wait()

        name = signal.Signals(self._signum).name
        logger.info(
            f"Exit signal received ({name}). Shutting down.",
            extra={"signal": name},
        )
        self._terminate(0)
