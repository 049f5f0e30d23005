"""
Get Pricing Rate MCP Tool.

Resolves the rate of a (period, hotel, room) triple through the shared
rate cache and returns it, or a structured error.
"""

import time
from typing import Any, Dict

from pricing_cache.models.rates import RateRequest
from pricing_cache.models.responses import RateData, ResponseMetadata, ToolResponse
from pricing_cache.server import build_error_response, get_services, mcp
from pricing_cache.utils.logger import get_logger

logger = get_logger(__name__)


@mcp.tool()
async def get_pricing_rate(params: RateRequest) -> Dict[str, Any]:
    """
    Get the current rate for a room.

    Rates are served from the cache while fresh (5 minutes by default)
    and fetched from the pricing API otherwise.

    Args:
        params: Validated rate triple (RateRequest)

    Returns:
        On success, a dictionary containing:
            - data: period, hotel, room and the integer rate
            - metadata: cache key, freshness window, timing
        On failure, an ErrorResponse dictionary:
            - 404 "Rate not found": the pricing API has no such rate
            - 503 "Rate unavailable": retry later

    Example:
        >>> result = await get_pricing_rate(RateRequest(
        ...     period="Summer", hotel="FloatingPointResort", room="SingletonRoom"
        ... ))
        >>> result["data"]["rate"]
        15000
    """
    start_time = time.time()
    services = get_services()

    result = await services.resolver.resolve(params)

    execution_time_ms = round((time.time() - start_time) * 1000, 2)

    if not result.valid:
        logger.info(
            "get_pricing_rate_failed",
            cache_key=params.cache_key,
            errors=result.errors,
            execution_time_ms=execution_time_ms,
        )
        return build_error_response(
            result.errors, services.settings.grace_window_seconds
        ).model_dump()

    tool_response = ToolResponse[RateData](
        data=RateData(
            period=params.period,
            hotel=params.hotel,
            room=params.room,
            rate=result.rate,
        ),
        metadata=ResponseMetadata(
            cache_key=params.cache_key,
            freshness_window_seconds=services.settings.freshness_window_seconds,
            execution_time_ms=execution_time_ms,
        ),
    )

    logger.info(
        "get_pricing_rate_completed",
        cache_key=params.cache_key,
        execution_time_ms=execution_time_ms,
    )

    return tool_response.model_dump()
