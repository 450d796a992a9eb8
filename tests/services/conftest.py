"""Service test fixtures — fake remote client, recording sink, wired service, API client.

Invariants:
    - Every test gets a fresh FakeFeatureDevClient and RecordingTelemetrySink
    - The service under test is a real FeatureDevService (only the client is faked)
    - get_featuredev_service dependency overridden for route tests

Design Decisions:
    - ASGITransport does not run the lifespan: no real HTTP client is created
"""

import pytest
from httpx import ASGITransport, AsyncClient

from featuredev.main import app
from featuredev.services.featuredev_service import FeatureDevService
from featuredev.services.service_provider import get_featuredev_service

from tests.services.fake_featuredev_client import (
    FakeFeatureDevClient,
    RecordingTelemetrySink,
)


@pytest.fixture
def fake_client():
    return FakeFeatureDevClient()


@pytest.fixture
def sink():
    return RecordingTelemetrySink()


@pytest.fixture
def service(fake_client, sink):
    return FeatureDevService(
        fake_client, sink, credential_start_url="https://start.example.com",
    )


@pytest.fixture
async def client(service):
    """FastAPI test client with the feature-dev service overridden."""
    app.dependency_overrides[get_featuredev_service] = lambda: service

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
