"""TTL (Time To Live) policies for cached pricing rates.

This module defines the default freshness window, the stampede grace
window and the timeouts that bound the locked compute path.
"""

from enum import Enum

import structlog

logger = structlog.get_logger(__name__)


class CacheTTL(Enum):
    """
    Default cache timing policies for pricing rates.

    - Freshness window: maximum age at which a rate is served as a hit
    - Grace window: how long a just-expired rate may still be served
      while another caller recomputes it, and how long a caller waits
      for the per-key lock
    - Lock timeout: auto-release of the per-key lock if its holder dies
    - API timeout: upper bound on one upstream pricing call

    Values are in seconds. Every value can be overridden through
    PricingSettings.
    """

    RATE_FRESHNESS = 300  # 5 minutes
    GRACE_WINDOW = 10
    LOCK_TIMEOUT = 5
    API_TIMEOUT = 2

    @staticmethod
    def physical_ttl(freshness_seconds: int, grace_seconds: int) -> int:
        """
        Determine the store-level expiry for a cached rate.

        The entry outlives its freshness window by the grace window so
        that it can be served as a stale fallback, but never longer.

        Args:
            freshness_seconds: Freshness window in seconds
            grace_seconds: Grace window in seconds

        Returns:
            Expiry in seconds to hand to the key-value store

        Example:
            >>> CacheTTL.physical_ttl(300, 10)
            310
        """
        ttl = int(freshness_seconds) + max(int(grace_seconds), 0)

        logger.debug(
            "physical_ttl_determined",
            freshness_seconds=freshness_seconds,
            grace_seconds=grace_seconds,
            ttl_seconds=ttl,
        )

        return ttl
