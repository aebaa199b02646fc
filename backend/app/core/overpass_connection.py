import httpx
import logging
from app.core.config import settings
from app.core.logger import logs

class OverpassConnection:
    """
    Owns the shared async HTTP client used for every Overpass request.
    The client is created lazily and closed once at application shutdown.
    """

    def __init__(self, user_agent: str = None, timeout: float = None):
        self.user_agent = user_agent or settings.OVERPASS_USER_AGENT
        self.timeout = timeout if timeout is not None else settings.OVERPASS_HTTP_TIMEOUT
        self._client: httpx.AsyncClient | None = None

    def get_client(self) -> httpx.AsyncClient:
        """Returns the shared client, opening it on first use."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout,
            )
            logs.log(logging.INFO, f"Overpass HTTP client initialized (User-Agent: {self.user_agent})")
        return self._client

    async def aclose(self):
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            logs.log(logging.INFO, "Overpass HTTP client closed")
        self._client = None

# Instantiate the connection manager
overpass_connection = OverpassConnection()
