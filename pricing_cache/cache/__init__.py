"""Caching layer for pricing rates.

This package provides:
- The shared Redis client (RedisCache)
- Cache key generation (RateCacheKey)
- TTL policies (CacheTTL)
- The CacheStore contract and its Redis (CacheManager) and
  in-memory (MemoryCacheStore) implementations
- Graceful fail-open behavior
"""

from pricing_cache.cache.connection import RedisCache
from pricing_cache.cache.keys import RateCacheKey
from pricing_cache.cache.manager import CacheManager
from pricing_cache.cache.memory import MemoryCacheStore
from pricing_cache.cache.store import CacheStore
from pricing_cache.cache.ttl import CacheTTL

__all__ = [
    # Connection
    "RedisCache",
    # Key generation
    "RateCacheKey",
    # Stores
    "CacheStore",
    "CacheManager",
    "MemoryCacheStore",
    # TTL policies
    "CacheTTL",
]
