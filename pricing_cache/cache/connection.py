"""Shared Redis client for rate entries and their compute locks."""

from typing import Optional

import redis.asyncio as redis
import structlog

logger = structlog.get_logger(__name__)

MAX_CONNECTIONS = 20
SOCKET_TIMEOUT_SECONDS = 5


def _redact(redis_url: str) -> str:
    return redis_url.split("@")[-1]


class RedisCache:
    """
    Redis client shared by every service instance's rate store.

    Nothing connects until the first command. A URL redis-py cannot
    parse leaves client as None; CacheManager then resolves rates
    without caching or locking.
    """

    def __init__(self, redis_url: str) -> None:
        self.client: Optional[redis.Redis] = None

        try:
            self.client = redis.from_url(
                redis_url,
                decode_responses=True,
                max_connections=MAX_CONNECTIONS,
                socket_timeout=SOCKET_TIMEOUT_SECONDS,
                socket_connect_timeout=SOCKET_TIMEOUT_SECONDS,
            )
        except ValueError as e:
            logger.error("redis_url_rejected", redis_url=_redact(redis_url), error=str(e))
            return

        logger.info("rate_store_redis_configured", redis_url=_redact(redis_url))

    async def ping(self) -> bool:
        """Report whether the rate store is reachable."""
        if self.client is None:
            return False

        try:
            return bool(await self.client.ping())
        except Exception as e:
            logger.warning("redis_ping_failed", error=str(e), error_type=type(e).__name__)
            return False

    async def close(self) -> None:
        if self.client is None:
            return

        try:
            # The client owns the pool created by from_url and closes it too
            await self.client.aclose()
        except Exception as e:
            logger.error("redis_close_error", error=str(e), error_type=type(e).__name__)
