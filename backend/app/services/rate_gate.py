"""
Minimum spacing between outbound Overpass requests.

Overpass is a shared public service; every request from this process goes
through one gate so that no two requests start less than the configured
interval apart, however many tasks are calling concurrently.
"""
import time
import asyncio
import logging
from typing import Awaitable, Callable, Optional

from app.core.config import settings
from app.core.logger import logs


class RateGate:
    """Serialises request start times with a fixed minimum interval."""

    def __init__(
        self,
        min_interval_ms: int = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Args:
            min_interval_ms: Minimum gap between two request starts.
            clock: Monotonic clock in seconds.
            sleep: Coroutine used to wait out the remaining gap.
        """
        if min_interval_ms is None:
            min_interval_ms = settings.MIN_REQUEST_INTERVAL_MS
        self.min_interval = min_interval_ms / 1000.0
        self._clock = clock
        self._sleep = sleep
        self._last_request: Optional[float] = None
        self._lock = asyncio.Lock()

    @property
    def last_request(self) -> Optional[float]:
        return self._last_request

    async def acquire(self) -> float:
        """
        Waits until a request may start, then records the start time.

        The read, the wait and the write happen under one lock, so a second
        caller only measures its gap once the first caller's timestamp is in
        place. Returns the recorded timestamp.
        """
        async with self._lock:
            if self._last_request is not None:
                elapsed = self._clock() - self._last_request
                if elapsed < self.min_interval:
                    delay = self.min_interval - elapsed
                    logs.log(logging.DEBUG, f"Rate gate: waiting {delay * 1000:.0f}ms before next Overpass request")
                    await self._sleep(delay)
            self._last_request = self._clock()
            return self._last_request
