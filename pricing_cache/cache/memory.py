"""In-process cache store with the same contract as the Redis store.

Used by tests and single-process development. Locks are per-key
asyncio locks, so mutual exclusion only holds inside one event loop.
A key's lock is dropped once no caller is using or waiting on it.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

import structlog

from pricing_cache.cache.store import ComputeFn, UsableFn
from pricing_cache.cache.ttl import CacheTTL

logger = structlog.get_logger(__name__)


@dataclass
class _MemoryEntry:
    value: Any
    fresh_until: float
    expires_at: float


@dataclass
class _KeyLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class MemoryCacheStore:
    """
    Dictionary-backed CacheStore.

    Attributes:
        entries: Stored entries by key, including stale ones still inside
            their grace window
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self.entries: Dict[str, _MemoryEntry] = {}
        self._locks: Dict[str, _KeyLock] = {}
        self._clock = clock

    def _evict_expired(self, now: float) -> None:
        expired = [key for key, entry in self.entries.items() if entry.expires_at <= now]
        for key in expired:
            self.entries.pop(key, None)

    def _read(self, key: str) -> Optional[_MemoryEntry]:
        entry = self.entries.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            self.entries.pop(key, None)
            return None
        return entry

    async def get(self, key: str) -> Optional[Any]:
        entry = self._read(key)
        if entry is None or entry.fresh_until <= self._clock():
            return None
        return entry.value

    async def set(
        self, key: str, value: Any, ttl: int, grace_window: int = 0
    ) -> bool:
        if value is None:
            logger.debug("cache_set_skipped", reason="empty_value", key=key)
            return False

        now = self._clock()
        self._evict_expired(now)
        self.entries[key] = _MemoryEntry(
            value=value,
            fresh_until=now + ttl,
            expires_at=now + CacheTTL.physical_ttl(ttl, grace_window),
        )
        return True

    async def delete(self, key: str) -> bool:
        return self.entries.pop(key, None) is not None

    def _usable_entry(
        self, key: str, usable: Optional[UsableFn]
    ) -> Optional[_MemoryEntry]:
        entry = self._read(key)
        if entry is None or usable is None or usable(entry.value):
            return entry
        return None

    async def fetch_or_compute_with_lock(
        self,
        key: str,
        ttl: int,
        grace_window: int,
        compute: ComputeFn,
        usable: Optional[UsableFn] = None,
    ) -> Optional[Any]:
        """See CacheManager.fetch_or_compute_with_lock."""
        key_lock = self._locks.get(key)
        if key_lock is None:
            key_lock = self._locks[key] = _KeyLock()

        key_lock.users += 1
        try:
            return await self._compute_locked(
                key_lock.lock, key, ttl, grace_window, compute, usable
            )
        finally:
            key_lock.users -= 1
            if not key_lock.users:
                self._locks.pop(key, None)

    async def _compute_locked(
        self,
        lock: asyncio.Lock,
        key: str,
        ttl: int,
        grace_window: int,
        compute: ComputeFn,
        usable: Optional[UsableFn],
    ) -> Optional[Any]:
        if lock.locked():
            entry = self._usable_entry(key, usable)
            if entry is not None:
                logger.info("serve_stale", key=key, fresh=entry.fresh_until > self._clock())
                return entry.value

            try:
                await asyncio.wait_for(lock.acquire(), timeout=grace_window)
            except asyncio.TimeoutError:
                logger.warning("lock_wait_timeout", key=key, grace_window=grace_window)
                return None
        else:
            await lock.acquire()

        try:
            entry = self._usable_entry(key, usable)
            if entry is not None and entry.fresh_until > self._clock():
                logger.debug("cache_filled_while_waiting", key=key)
                return entry.value

            value = await compute()

            if value is not None:
                await self.set(key, value, ttl, grace_window)

            return value

        finally:
            lock.release()
