"""Cache store contract and the stored entry envelope.

Every backend stores values inside a small JSON envelope that records
when the value stops being fresh. The physical expiry handed to the
backend is longer than the freshness window by the grace window, which
is what makes a stale fallback available while a rate is recomputed.
"""

import json
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional, Protocol

ComputeFn = Callable[[], Awaitable[Optional[Any]]]
UsableFn = Callable[[Any], bool]


@dataclass(frozen=True)
class CachedEntry:
    """A decoded cache entry."""

    value: Any
    fresh_until: Optional[float]

    def is_fresh(self, now: float) -> bool:
        """Entries written without freshness metadata rely on store expiry alone."""
        return self.fresh_until is None or now < self.fresh_until


def encode_entry(value: Any, ttl: int, now: Optional[float] = None) -> str:
    """
    Serialize a value into the stored envelope.

    Args:
        value: JSON-serializable value (never None)
        ttl: Freshness window in seconds
        now: Current epoch time (defaults to time.time())

    Returns:
        JSON string

    Raises:
        TypeError: If value is not JSON-serializable
    """
    now = time.time() if now is None else now
    return json.dumps(
        {
            "value": value,
            "cached_at": datetime.fromtimestamp(now, tz=timezone.utc).isoformat(),
            "fresh_until": now + ttl,
            "ttl": ttl,
        }
    )


def decode_entry(raw: Any) -> Optional[CachedEntry]:
    """
    Decode a stored value.

    Envelopes written by this package carry "fresh_until". A bare scalar
    (for example a rate written by an operator with SET ... EX ...) is
    treated as fresh for as long as the store keeps it.

    Returns:
        CachedEntry, or None for empty values

    Raises:
        json.JSONDecodeError: If the stored string is not JSON
        ValueError: If an envelope carries a non-numeric "fresh_until"
    """
    if raw is None:
        return None

    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")

    data = json.loads(raw)

    if isinstance(data, dict) and "value" in data:
        if data["value"] is None:
            return None
        fresh_until = data.get("fresh_until")
        if fresh_until is not None and (
            isinstance(fresh_until, bool) or not isinstance(fresh_until, (int, float))
        ):
            raise ValueError(f"fresh_until must be an epoch timestamp, got {fresh_until!r}")
        return CachedEntry(value=data["value"], fresh_until=fresh_until)

    if data is None:
        return None

    return CachedEntry(value=data, fresh_until=None)


class CacheStore(Protocol):
    """
    Capability consumed by the rate resolver.

    get() returns only fresh values. fetch_or_compute_with_lock() runs
    compute at most once at a time per key across every process sharing
    the store, and never persists a None result. Stored values rejected
    by the optional usable predicate are treated as absent, so compute
    replaces them.
    """

    async def get(self, key: str) -> Optional[Any]:
        ...

    async def set(
        self, key: str, value: Any, ttl: int, grace_window: int = 0
    ) -> bool:
        ...

    async def fetch_or_compute_with_lock(
        self,
        key: str,
        ttl: int,
        grace_window: int,
        compute: ComputeFn,
        usable: Optional[UsableFn] = None,
    ) -> Optional[Any]:
        ...
