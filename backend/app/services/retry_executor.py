"""
Executes a single Overpass query with bounded retries.

Only throttling (HTTP 429) is retried, with exponential backoff. Any other
non-2xx status, transport failure or unreadable body fails the call at once.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable

import httpx

from app.core.config import settings
from app.core.errors import (
    OverpassError,
    OverpassRateLimitError,
    OverpassResponseError,
    OverpassTransportError,
)
from app.core.logger import logs
from app.services.rate_gate import RateGate


def retry_delay_ms(attempt: int, initial_delay_ms: int = None, max_delay_ms: int = None) -> int:
    """min(initial * 2^(attempt-1), max) for a 1-based attempt number."""
    if initial_delay_ms is None:
        initial_delay_ms = settings.INITIAL_RETRY_DELAY_MS
    if max_delay_ms is None:
        max_delay_ms = settings.MAX_RETRY_DELAY_MS
    return min(initial_delay_ms * 2 ** (attempt - 1), max_delay_ms)


class RetryExecutor:
    def __init__(
        self,
        client: httpx.AsyncClient,
        rate_gate: RateGate,
        url: str = None,
        max_retries: int = None,
        initial_delay_ms: int = None,
        max_delay_ms: int = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.client = client
        self.rate_gate = rate_gate
        self.url = url or settings.OVERPASS_URL
        self.max_retries = max_retries if max_retries is not None else settings.MAX_RETRIES
        self.initial_delay_ms = initial_delay_ms if initial_delay_ms is not None else settings.INITIAL_RETRY_DELAY_MS
        self.max_delay_ms = max_delay_ms if max_delay_ms is not None else settings.MAX_RETRY_DELAY_MS
        self._sleep = sleep

    def _delay(self, attempt: int) -> float:
        return retry_delay_ms(attempt, self.initial_delay_ms, self.max_delay_ms) / 1000.0

    async def _post(self, query: str) -> httpx.Response:
        return await self.client.post(
            self.url,
            data={"data": query},
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )

    async def execute(self, query: str) -> dict[str, Any]:
        """
        Runs the query and returns the decoded JSON body.

        Raises:
            OverpassRateLimitError: still throttled after the last attempt.
            OverpassResponseError: any other non-2xx status.
            OverpassTransportError: network failure or body that is not JSON.
        """
        last_error: Exception | None = None

        for attempt in range(1, self.max_retries + 1):
            try:
                await self.rate_gate.acquire()
                response = await self._post(query)

                if response.status_code == 429:
                    if attempt == self.max_retries:
                        raise OverpassRateLimitError(self.max_retries)
                    delay = self._delay(attempt)
                    logs.log(
                        logging.WARNING,
                        f"Rate limited (429), retrying in {delay * 1000:.0f}ms (attempt {attempt}/{self.max_retries})",
                    )
                    await self._sleep(delay)
                    continue

                if not response.is_success:
                    raise OverpassResponseError(response.status_code)

                data = response.json()
                if not isinstance(data, dict):
                    raise OverpassTransportError(f"Unexpected Overpass payload: {type(data).__name__}")
                return data

            except OverpassError as e:
                last_error = e
                logs.log(logging.ERROR, f"Attempt {attempt} failed: {e}")
                raise

            except (httpx.HTTPError, ValueError) as e:
                last_error = OverpassTransportError(f"Overpass request failed: {e}")
                logs.log(logging.ERROR, f"Attempt {attempt} failed: {e}")

                if attempt == self.max_retries:
                    raise last_error from e

                # Only a throttling condition is worth another attempt
                if "429" in str(e):
                    delay = self._delay(attempt)
                    logs.log(logging.WARNING, f"Retrying in {delay * 1000:.0f}ms (attempt {attempt}/{self.max_retries})")
                    await self._sleep(delay)
                    continue
                raise last_error from e

        raise last_error or OverpassError("Unknown error executing Overpass query")
