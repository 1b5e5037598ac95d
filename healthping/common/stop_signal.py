"""
Single-fire stop signal

Armed until the first fire(), fired forever after. Any number of tasks
may wait on it; any number of callers may try to fire it.
"""

import asyncio
import threading
from datetime import datetime, timezone


class StopSignal:
    """One-shot event with an explicit guard against double fire"""

    def __init__(self, name: str = "stop"):
        self.name = name
        self._lock = threading.Lock()
        self._fired = False
        self._fired_at: datetime | None = None
        self._event = asyncio.Event()

    @property
    def is_fired(self) -> bool:
        return self._fired

    @property
    def fired_at(self) -> datetime | None:
        return self._fired_at

    def fire(self) -> bool:
        """
        Fire the signal.

        Returns:
            True if this call fired it, False if it was already fired
        """
        with self._lock:
            if self._fired:
                return False
            self._fired = True
            self._fired_at = datetime.now(timezone.utc)

        self._event.set()
        return True

    async def wait(self) -> None:
        """Block until the signal has fired"""
        await self._event.wait()

    def __repr__(self) -> str:
        state = "fired" if self._fired else "armed"
        return f"<StopSignal {self.name} {state}>"
