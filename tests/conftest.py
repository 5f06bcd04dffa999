"""Pytest configuration and fixtures for the storefront service."""

import pytest
import pytest_asyncio
from fakeredis import aioredis as fakeredis
from httpx import ASGITransport, AsyncClient

from storefront.config import settings
from storefront.models.product import Product
from storefront.services.catalog.loader import Catalog
from storefront.services.session.redis_client import get_redis_client
from storefront.services.verification.registry import (
    VerificationRegistry,
    get_verification_registry,
    load_verification_requests,
)

SESSION_ID = "test-session"

_DELAY_SETTINGS = (
    "ADD_TO_CART_DELAY_MS",
    "PLACE_ORDER_DELAY_MS",
    "VERIFICATION_DELAY_MS",
    "REVIEW_DELAY_MS",
)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "asyncio: marks tests as async tests")


@pytest.fixture(autouse=True)
def no_simulated_latency(monkeypatch):
    """Resolve every simulated network call immediately."""
    for name in _DELAY_SETTINGS:
        monkeypatch.setattr(settings, name, 0)


@pytest.fixture
def make_product():
    """Build catalog products with sensible defaults."""

    def _make(product_id: str, **overrides) -> Product:
        data = {
            "id": product_id,
            "name": f"Producto {product_id}",
            "category": "Textiles",
            "state": "Oaxaca",
            "price": 100,
            "maker": "Taller de prueba",
            "images": ["https://example.com/image.jpg"],
        }
        data.update(overrides)
        return Product.model_validate(data)

    return _make


@pytest.fixture
def scenario_catalog(make_product):
    """The three-product catalog used by the filter scenarios."""
    return Catalog(
        [
            make_product("A", name="A", category="Textiles", price=100, rating=4.5, in_stock=True),
            make_product("B", name="B", category="Textiles", price=300, rating=3.0, in_stock=False),
            make_product("C", name="C", category="Cerámica", price=200, rating=5.0, in_stock=True),
        ]
    )


@pytest.fixture
def session_headers():
    return {"X-Session-Id": SESSION_ID}


@pytest.fixture
def verification_registry():
    """Fresh registry per test so decisions do not leak between tests."""
    from storefront.main import app

    registry = VerificationRegistry(load_verification_requests(settings.VERIFICATIONS_PATH))
    app.dependency_overrides[get_verification_registry] = lambda: registry
    yield registry
    app.dependency_overrides.pop(get_verification_registry, None)


@pytest_asyncio.fixture()
async def redis_client():
    """Provide a fake Redis client for each test."""
    from storefront.main import app

    client = fakeredis.FakeRedis(decode_responses=True)
    app.dependency_overrides[get_redis_client] = lambda: client
    try:
        yield client
    finally:
        await client.flushdb()
        await client.aclose()
        app.dependency_overrides.pop(get_redis_client, None)


@pytest_asyncio.fixture()
async def client(redis_client, verification_registry):
    """Return an HTTPX async client pointing at the FastAPI app."""
    from storefront.main import app

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
    ) as test_client:
        yield test_client
