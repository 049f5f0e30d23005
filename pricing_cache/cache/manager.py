"""Cache manager for Redis operations with fail-open error handling.

This module provides the CacheManager class, the Redis-backed CacheStore.
It implements the cache-aside pattern with a per-key distributed lock so
that concurrent misses for one key, from any service instance, trigger a
single computation.
"""

import time
from typing import Any, Callable, Optional

import redis.asyncio as redis
import structlog
from redis.exceptions import LockError

from pricing_cache.cache.keys import RateCacheKey
from pricing_cache.cache.store import (
    CachedEntry,
    ComputeFn,
    UsableFn,
    decode_entry,
    encode_entry,
)
from pricing_cache.cache.ttl import CacheTTL

logger = structlog.get_logger(__name__)


class CacheManager:
    """
    Redis cache store with fail-open behavior.

    Read errors are treated as misses and write errors are dropped, so an
    unavailable Redis degrades to uncached resolution instead of failing
    requests.

    Attributes:
        redis: Redis client instance (None when Redis is unavailable)
        lock_timeout: Seconds after which a held compute lock auto-expires
    """

    def __init__(
        self,
        client: Optional[redis.Redis],
        lock_timeout: float = CacheTTL.LOCK_TIMEOUT.value,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize cache manager.

        Args:
            client: Redis client, usually RedisCache.client
            lock_timeout: Auto-release time of per-key locks in seconds
            clock: Epoch clock used for freshness checks
        """
        self.redis = client
        self.lock_timeout = lock_timeout
        self._clock = clock

    async def _read(self, key: str) -> Optional[CachedEntry]:
        """Read an entry regardless of freshness."""
        if not self.redis:
            logger.debug("cache_get_skipped", reason="redis_not_available", key=key)
            return None

        try:
            return decode_entry(await self.redis.get(key))

        except ValueError as e:
            # Undecodable JSON or a corrupt envelope; drop it so it is recomputed
            logger.error(
                "cache_get_decode_error",
                key=key,
                error=str(e),
                error_type=type(e).__name__,
            )
            await self.delete(key)
            return None

        except Exception as e:
            logger.error(
                "cache_get_error",
                key=key,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

    async def get(self, key: str) -> Optional[Any]:
        """
        Retrieve a fresh cached value by key.

        Args:
            key: Cache key to retrieve

        Returns:
            The cached value, or None if absent or past its freshness window

        Example:
            >>> manager = CacheManager(RedisCache().client)
            >>> rate = await manager.get("pricing_rate:Summer:Resort:Suite")
        """
        entry = await self._read(key)

        if entry is None:
            return None

        if not entry.is_fresh(self._clock()):
            logger.debug("cache_entry_stale", key=key)
            return None

        return entry.value

    async def set(
        self, key: str, value: Any, ttl: int, grace_window: int = 0
    ) -> bool:
        """
        Store value in cache with TTL.

        Args:
            key: Cache key
            value: Data to cache (must be JSON-serializable, never None)
            ttl: Freshness window in seconds
            grace_window: Extra seconds the value survives as a stale fallback

        Returns:
            True if cached successfully, False otherwise
        """
        if value is None:
            logger.debug("cache_set_skipped", reason="empty_value", key=key)
            return False

        if not self.redis:
            logger.debug("cache_set_skipped", reason="redis_not_available", key=key)
            return False

        try:
            payload = encode_entry(value, ttl, now=self._clock())
            await self.redis.setex(key, CacheTTL.physical_ttl(ttl, grace_window), payload)

            logger.debug("cache_written", key=key, ttl=ttl, grace_window=grace_window)

            return True

        except (TypeError, ValueError) as e:
            logger.error(
                "cache_set_serialization_error",
                key=key,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

        except Exception as e:
            logger.error(
                "cache_set_error",
                key=key,
                error=str(e),
                error_type=type(e).__name__,
            )
            # Fail silently (cache write failures shouldn't break requests)
            return False

    async def delete(self, key: str) -> bool:
        """
        Delete cached value by key.

        Args:
            key: Cache key to delete

        Returns:
            True if deleted, False otherwise
        """
        if not self.redis:
            logger.debug("cache_delete_skipped", reason="redis_not_available", key=key)
            return False

        try:
            result = await self.redis.delete(key)
            logger.debug("cache_delete", key=key, deleted=bool(result))
            return bool(result)

        except Exception as e:
            logger.error(
                "cache_delete_error",
                key=key,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

    async def fetch_or_compute_with_lock(
        self,
        key: str,
        ttl: int,
        grace_window: int,
        compute: ComputeFn,
        usable: Optional[UsableFn] = None,
    ) -> Optional[Any]:
        """
        Get a value or compute it under a per-key distributed lock.

        Only the lock holder runs compute. A caller that finds the lock
        busy takes the stale value if one is still inside the grace
        window; otherwise it waits up to grace_window seconds for the
        lock and then re-checks the cache, which the previous holder has
        usually filled by then.

        Args:
            key: Cache key
            ttl: Freshness window in seconds for a computed value
            grace_window: Stale-serving and lock-wait window in seconds
            compute: Async function producing the value, or None when
                there is nothing valid to cache
            usable: Predicate on stored values; rejected values are
                treated as absent and overwritten by compute

        Returns:
            The cached, stale or computed value; None when compute
            produced nothing or the lock could not be acquired in time

        Example:
            >>> async def fetch_rate():
            ...     return 15000
            >>> rate = await manager.fetch_or_compute_with_lock(
            ...     "pricing_rate:Summer:Resort:Suite", 300, 10, fetch_rate
            ... )
        """
        if not self.redis:
            logger.debug("cache_lock_skipped", reason="redis_not_available", key=key)
            return await compute()

        lock = self.redis.lock(RateCacheKey.lock_key(key), timeout=self.lock_timeout)

        try:
            acquired = await lock.acquire(blocking=False)

            if not acquired:
                entry = self._usable(await self._read(key), usable)
                if entry is not None:
                    logger.info("serve_stale", key=key, fresh=entry.is_fresh(self._clock()))
                    return entry.value

                logger.debug("cache_lock_wait", key=key, grace_window=grace_window)
                acquired = await lock.acquire(blocking=True, blocking_timeout=grace_window)

        except Exception as e:
            logger.error(
                "cache_lock_error",
                key=key,
                error=str(e),
                error_type=type(e).__name__,
            )
            # Fail open - compute without the lock and without caching
            return await compute()

        if not acquired:
            logger.warning("lock_wait_timeout", key=key, grace_window=grace_window)
            return None

        try:
            entry = self._usable(await self._read(key), usable)
            if entry is not None and entry.is_fresh(self._clock()):
                logger.debug("cache_filled_while_waiting", key=key)
                return entry.value

            value = await compute()

            if value is not None:
                await self.set(key, value, ttl, grace_window)

            return value

        finally:
            await self._release(lock, key)

    @staticmethod
    def _usable(
        entry: Optional[CachedEntry], usable: Optional[UsableFn]
    ) -> Optional[CachedEntry]:
        if entry is None or usable is None or usable(entry.value):
            return entry
        return None

    async def _release(self, lock: Any, key: str) -> None:
        try:
            await lock.release()
        except LockError as e:
            # Lock expired while computing; another caller may hold it now
            logger.warning("cache_lock_release_failed", key=key, error=str(e))
        except Exception as e:
            logger.error(
                "cache_lock_release_error",
                key=key,
                error=str(e),
                error_type=type(e).__name__,
            )
