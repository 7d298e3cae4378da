"""
Pytest configuration and shared fixtures for the Script Analyzer tests.
"""
from unittest.mock import AsyncMock, Mock

import fakeredis
import fakeredis.aioredis
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from main import app
from script_analyzer.core.rate_limit import limiter
from script_analyzer.services.analysis_service import InFlightClients, get_in_flight_clients
from script_analyzer.services.analysis_state_store import AnalysisStateStore, get_state_store
from script_analyzer.services.generation_service import GenerationService, get_generation_service

SAMPLE_ANALYSIS = (
    "# Script Overview\n"
    "\n"
    "## Main Characters\n"
    "* **Ada**: a reluctant detective\n"
    "* **Ben**: her estranged brother\n"
    "\n"
    "The core conflict is **trust** versus **duty**."
)


@pytest.fixture(autouse=True)
def disable_rate_limit():
    """Keep the analyze rate limit from tripping across tests."""
    limiter.enabled = False
    yield
    limiter.enabled = True


@pytest.fixture
def sample_analysis():
    return SAMPLE_ANALYSIS


@pytest_asyncio.fixture
async def fake_redis():
    fake_server = fakeredis.FakeServer()
    client = fakeredis.aioredis.FakeRedis(server=fake_server)
    try:
        yield client
    finally:
        await client.flushall()


@pytest_asyncio.fixture
async def state_store(fake_redis):
    return AnalysisStateStore(
        redis_url="redis://fakeredis",
        key_prefix="scriptAnalysisData",
        redis_client=fake_redis,
    )


@pytest.fixture
def fake_generator(sample_analysis):
    """Generation service double returning a canned analysis."""
    generator = Mock(spec=GenerationService)
    generator.generate = AsyncMock(return_value=sample_analysis)
    return generator


@pytest.fixture
def in_flight():
    return InFlightClients()


@pytest_asyncio.fixture
async def api_client(fake_generator, state_store, in_flight):
    app.dependency_overrides[get_generation_service] = lambda: fake_generator
    app.dependency_overrides[get_state_store] = lambda: state_store
    app.dependency_overrides[get_in_flight_clients] = lambda: in_flight
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
            headers={"X-Client-Id": "browser-1"},
        ) as client:
            yield client
    finally:
        app.dependency_overrides.clear()
