import sys
import asyncio
from pathlib import Path
from urllib.parse import parse_qs

import httpx
import pytest
import pytest_asyncio
import respx

# Ensure the backend package root is on sys.path for direct pytest runs
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from app.core.config import settings
from app.repos.result_cache import ResultCache
from app.services.Geo_service import GeoResolver
from app.services.rate_gate import RateGate
from app.services.retry_executor import RetryExecutor

OVERPASS_URL = settings.OVERPASS_URL


class FakeClock:
    """Manually advanced clock whose sleep() just moves time forward."""

    def __init__(self, start: float = 1_000.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds

    async def sleep(self, seconds: float):
        self.sleeps.append(seconds)
        self.now += seconds
        # let other tasks run, like a real sleep would
        await asyncio.sleep(0)


def node(id: int, name: str, lat: float = 53.0, lon: float = -6.5, **tags) -> dict:
    """Overpass node element with a name tag."""
    if not tags:
        tags = {"place": "town"}
    return {"type": "node", "id": id, "lat": lat, "lon": lon, "tags": {"name": name, **tags}}


def overpass_query(request: httpx.Request) -> str:
    """The QL text of a form-encoded Overpass request."""
    return parse_qs(request.content.decode())["data"][0]


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def overpass_api():
    with respx.mock(assert_all_called=False) as mock:
        yield mock


@pytest_asyncio.fixture
async def http_client():
    async with httpx.AsyncClient(headers={"User-Agent": settings.OVERPASS_USER_AGENT}) as client:
        yield client


@pytest.fixture
def resolver(http_client, fake_clock):
    gate = RateGate(min_interval_ms=0)
    executor = RetryExecutor(http_client, gate, sleep=fake_clock.sleep)
    return GeoResolver(
        http_client,
        rate_gate=gate,
        cache=ResultCache(clock=fake_clock),
        executor=executor,
    )
