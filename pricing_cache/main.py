"""
Pricing Cache Server - Main Entry Point

Configures logging, wires the Redis-backed rate cache and runs the
FastMCP server.
"""
import asyncio
import sys

from pricing_cache.config import PricingSettings
from pricing_cache.pricing.exceptions import ConfigurationError
from pricing_cache.server import build_services, mcp, set_services
from pricing_cache.utils.logger import get_logger, setup_logging

# Import tools to register them with the MCP server
import pricing_cache.tools  # noqa: F401

logger = get_logger(__name__)

TRANSPORTS = {
    "stdio": mcp.run_stdio_async,
    "sse": mcp.run_sse_async,
    "streamable-http": mcp.run_streamable_http_async,
}


async def main() -> None:
    """
    Main entry point.

    Initializes:
        1. Settings from the environment
        2. Structured logging
        3. Redis cache, pricing API client and resolver
        4. FastMCP server on the configured transport
    """
    try:
        settings = PricingSettings.from_env()
    except ConfigurationError as e:
        setup_logging()
        logger.error("invalid_configuration", error=str(e))
        sys.exit(1)

    setup_logging(level=settings.log_level, environment=settings.environment)

    logger.info(
        "server_starting",
        version="1.0.0",
        environment=settings.environment,
        log_level=settings.log_level,
    )

    services = build_services(settings)
    set_services(services)

    run = TRANSPORTS.get(settings.mcp_transport)
    if run is None:
        logger.error("unknown_transport", transport=settings.mcp_transport)
        await services.close()
        sys.exit(1)

    logger.info("starting_mcp_server", transport=settings.mcp_transport)

    try:
        # Run server (blocks until shutdown)
        await run()
    except Exception as e:
        logger.error(
            "server_error",
            error=str(e),
            exc_info=True,
        )
        raise
    finally:
        await services.close()
        set_services(None)
        logger.info("server_shutdown_complete")


def run() -> None:
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
