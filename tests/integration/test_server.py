"""
Integration tests for the FastMCP server and the get_pricing_rate tool.

Tools run against the in-memory cache store and a mocked pricing client.
"""
import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from pricing_cache.cache.memory import MemoryCacheStore
from pricing_cache.config import PricingSettings
from pricing_cache.models.rates import RateRequest
from pricing_cache.pricing.client import RateApiResponse
from pricing_cache.pricing.resolver import RateResolver
from pricing_cache.server import (
    SERVER_NAME,
    PricingServices,
    build_error_response,
    build_services,
    create_mcp_server,
    health_check,
    set_services,
)
from pricing_cache.tools.get_pricing_rate import get_pricing_rate

PARAMS = RateRequest(period="Summer", hotel="FloatingPointResort", room="SingletonRoom")
MATCHING = RateApiResponse(
    success=True,
    status_code=200,
    body=json.dumps(
        {
            "rates": [
                {
                    "period": "Summer",
                    "hotel": "FloatingPointResort",
                    "room": "SingletonRoom",
                    "rate": "15000",
                }
            ]
        }
    ).encode(),
)


@pytest.fixture
def client():
    mock = AsyncMock()
    mock.get_rate = AsyncMock(return_value=MATCHING)
    return mock


@pytest.fixture
def services(client):
    settings = PricingSettings()
    store = MemoryCacheStore()
    redis_cache = MagicMock()
    redis_cache.ping = AsyncMock(return_value=True)
    redis_cache.close = AsyncMock()
    services = PricingServices(
        settings=settings,
        redis_cache=redis_cache,
        client=client,
        resolver=RateResolver.from_settings(store, client, settings),
    )
    set_services(services)
    yield services
    set_services(None)


class TestServerInitialization:
    """Test suite for MCP server initialization."""

    def test_create_mcp_server(self):
        """Test that MCP server can be created successfully."""
        server = create_mcp_server()

        assert server is not None
        assert server.name == SERVER_NAME

    def test_build_services_wires_settings(self):
        """Test services are built from settings without touching Redis."""
        settings = PricingSettings(freshness_window_seconds=120, grace_window_seconds=5)

        services = build_services(settings)

        assert services.resolver.freshness_window == 120
        assert services.resolver.grace_window == 5
        assert services.resolver.api_timeout == settings.api_timeout_seconds
        assert services.redis_cache.client is not None


class TestErrorMapping:
    """Test suite for build_error_response()."""

    def test_not_found(self):
        response = build_error_response(["Rate not found"], retry_after=10)

        assert response.code == 404
        assert response.message == "Rate not found"
        assert "retry_after_seconds" not in response.data

    def test_unavailable_is_retryable(self):
        response = build_error_response(["Rate unavailable"], retry_after=10)

        assert response.code == 503
        assert response.data["retry_after_seconds"] == 10

    def test_empty_errors_default_to_unavailable(self):
        assert build_error_response([], retry_after=10).code == 503


class TestGetPricingRate:
    """Test suite for the get_pricing_rate tool."""

    @pytest.mark.asyncio
    async def test_success_payload(self, services, client):
        result = await get_pricing_rate(PARAMS)

        assert result["data"] == {
            "period": "Summer",
            "hotel": "FloatingPointResort",
            "room": "SingletonRoom",
            "rate": 15000,
        }
        assert result["metadata"]["cache_key"] == PARAMS.cache_key
        assert result["metadata"]["freshness_window_seconds"] == 300
        client.get_rate.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_second_call_served_from_cache(self, services, client):
        await get_pricing_rate(PARAMS)
        await get_pricing_rate(PARAMS)

        assert client.get_rate.await_count == 1

    @pytest.mark.asyncio
    async def test_not_found_payload(self, services, client):
        client.get_rate.return_value = RateApiResponse(
            success=True, status_code=200, body=b'{"rates": []}'
        )

        result = await get_pricing_rate(PARAMS)

        assert result["code"] == 404
        assert result["message"] == "Rate not found"

    @pytest.mark.asyncio
    async def test_unavailable_payload(self, services, client):
        client.get_rate.return_value = RateApiResponse(
            success=False, status_code=500, body=b"upstream exploded"
        )

        result = await get_pricing_rate(PARAMS)

        assert result["code"] == 503
        assert result["message"] == "Rate unavailable"
        assert "upstream exploded" not in json.dumps(result)


class TestHealthCheck:
    """Test suite for the health check tool."""

    @pytest.mark.asyncio
    async def test_healthy(self, services):
        result = await health_check()

        assert result["status"] == "healthy"
        assert result["components"]["redis"] == "healthy"

    @pytest.mark.asyncio
    async def test_degraded_without_redis(self, services):
        services.redis_cache.ping.return_value = False

        result = await health_check()

        assert result["status"] == "degraded"
        assert result["components"]["redis"] == "unhealthy"

    @pytest.mark.asyncio
    async def test_close_releases_resources(self, services, client):
        await services.close()

        client.close.assert_awaited_once()
        services.redis_cache.close.assert_awaited_once()
