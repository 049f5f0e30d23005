"""
FastMCP server initialization and service wiring.

Builds the cache store, upstream client and resolver from settings and
exposes them to the MCP tools, together with a health check.
"""
from dataclasses import dataclass
from typing import Any, List, Optional

from mcp.server.fastmcp import FastMCP

from pricing_cache.cache import CacheManager, RedisCache
from pricing_cache.config import PricingSettings
from pricing_cache.models.responses import ErrorResponse, HealthCheckResponse
from pricing_cache.pricing.client import RateApiClient
from pricing_cache.pricing.exceptions import RateErrorCode
from pricing_cache.pricing.resolver import RateResolver
from pricing_cache.utils.logger import get_logger

logger = get_logger(__name__)

# Server metadata
SERVER_NAME = "pricing-cache-server"
SERVER_VERSION = "1.0.0"
SERVER_DESCRIPTION = "Read-through cache for hotel room pricing rates"

# Error code per user-facing message
ERROR_CODES = {
    RateErrorCode.RATE_NOT_FOUND.value: 404,
    RateErrorCode.RATE_UNAVAILABLE.value: 503,
}


@dataclass
class PricingServices:
    """Process-wide collaborators of the MCP tools."""

    settings: PricingSettings
    redis_cache: Optional[RedisCache]
    client: RateApiClient
    resolver: RateResolver

    async def close(self) -> None:
        await self.client.close()
        if self.redis_cache is not None:
            await self.redis_cache.close()


def build_services(settings: PricingSettings) -> PricingServices:
    """
    Wire the Redis store, pricing client and resolver.

    Args:
        settings: Validated service settings

    Returns:
        PricingServices ready for use by the tools
    """
    redis_cache = RedisCache(settings.redis_url)
    store = CacheManager(redis_cache.client, lock_timeout=settings.lock_timeout_seconds)
    client = RateApiClient(
        settings.rate_api_url,
        token=settings.rate_api_token,
        timeout=settings.api_timeout_seconds,
    )
    resolver = RateResolver.from_settings(store, client, settings)

    logger.info(
        "pricing_services_built",
        freshness_window_seconds=settings.freshness_window_seconds,
        grace_window_seconds=settings.grace_window_seconds,
        api_timeout_seconds=settings.api_timeout_seconds,
    )

    return PricingServices(
        settings=settings,
        redis_cache=redis_cache,
        client=client,
        resolver=resolver,
    )


_services: Optional[PricingServices] = None


def get_services() -> PricingServices:
    """Return the configured services, building them from the environment on first use."""
    global _services
    if _services is None:
        _services = build_services(PricingSettings.from_env())
    return _services


def set_services(services: Optional[PricingServices]) -> None:
    """Install (or clear) the services used by the tools."""
    global _services
    _services = services


def build_error_response(errors: List[str], retry_after: int) -> ErrorResponse:
    """
    Map resolution errors to an ErrorResponse.

    The first error decides the code; "Rate unavailable" is retryable.
    """
    message = errors[0] if errors else RateErrorCode.RATE_UNAVAILABLE.value
    code = ERROR_CODES.get(message, 503)

    data: dict[str, Any] = {"errors": list(errors)}
    if code == 503:
        data["retry_after_seconds"] = retry_after

    return ErrorResponse(code=code, message=message, data=data)


def create_mcp_server() -> FastMCP:
    """
    Create and configure the FastMCP server instance.

    Returns:
        Configured FastMCP server with the health check registered
    """
    mcp = FastMCP(name=SERVER_NAME, instructions=SERVER_DESCRIPTION)

    logger.info(
        "mcp_server_initialized",
        name=SERVER_NAME,
        version=SERVER_VERSION,
    )

    register_health_check(mcp)

    return mcp


async def health_check() -> dict[str, Any]:
    """
    Health check endpoint for monitoring.

    Returns:
        Dictionary with status, version, and component health
    """
    services = get_services()

    redis_healthy = services.redis_cache is not None and await services.redis_cache.ping()

    components = {
        "server": "healthy",
        "redis": "healthy" if redis_healthy else "unhealthy",
    }

    # Without Redis rates are still served, just never cached
    overall_status = "healthy" if redis_healthy else "degraded"

    response = HealthCheckResponse(
        status=overall_status,
        version=SERVER_VERSION,
        components=components,
    )

    logger.debug("health_check_performed", status=overall_status)

    return response.model_dump()


def register_health_check(mcp: FastMCP) -> None:
    """
    Register health check tool.

    Args:
        mcp: FastMCP server instance
    """
    mcp.tool()(health_check)


# Create global MCP server instance (singleton)
mcp = create_mcp_server()
