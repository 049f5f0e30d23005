"""Cache key generation for pricing rates.

This module provides the RateCacheKey class for deriving the stable,
human-readable cache key of a (period, hotel, room) triple.
"""

from typing import Dict

import structlog

logger = structlog.get_logger(__name__)


class RateCacheKey:
    """
    Generate consistent cache keys for pricing rates.

    Cache keys follow the pattern: pricing_rate:{period}:{hotel}:{room}

    Fields are used verbatim, except that "%" and ":" are percent-escaped
    ("%25" and "%3A") so that a field containing the delimiter can never
    collide with a different triple. Keys of colon-free fields are
    therefore identical to the plain colon-joined form.

    Attributes:
        PREFIX: Namespace of every pricing rate key
        LOCK_PREFIX: Namespace of the per-key compute locks
    """

    PREFIX = "pricing_rate"
    LOCK_PREFIX = "lock"

    @staticmethod
    def _escape(value: str) -> str:
        return value.replace("%", "%25").replace(":", "%3A")

    @staticmethod
    def _unescape(value: str) -> str:
        return value.replace("%3A", ":").replace("%25", "%")

    @staticmethod
    def generate(period: str, hotel: str, room: str) -> str:
        """
        Generate the cache key for a rate triple.

        Args:
            period: Pricing period (e.g., "Summer")
            hotel: Hotel identifier
            room: Room identifier

        Returns:
            Cache key string in format: pricing_rate:{period}:{hotel}:{room}

        Example:
            >>> RateCacheKey.generate("Summer", "FloatingPointResort", "SingletonRoom")
            'pricing_rate:Summer:FloatingPointResort:SingletonRoom'
        """
        escape = RateCacheKey._escape
        cache_key = ":".join(
            [RateCacheKey.PREFIX, escape(period), escape(hotel), escape(room)]
        )

        logger.debug("cache_key_generated", cache_key=cache_key)

        return cache_key

    @staticmethod
    def lock_key(cache_key: str) -> str:
        """
        Name of the distributed lock guarding a cache key.

        Example:
            >>> RateCacheKey.lock_key("pricing_rate:Summer:Resort:Suite")
            'lock:pricing_rate:Summer:Resort:Suite'
        """
        return f"{RateCacheKey.LOCK_PREFIX}:{cache_key}"

    @staticmethod
    def parse(cache_key: str) -> Dict[str, str]:
        """
        Parse cache key back to its rate triple.

        Args:
            cache_key: Cache key string to parse

        Returns:
            Dictionary with keys "period", "hotel" and "room"

        Raises:
            ValueError: If cache key format is invalid

        Example:
            >>> parsed = RateCacheKey.parse("pricing_rate:Summer:Resort:Suite")
            >>> parsed["hotel"]
            'Resort'
        """
        parts = cache_key.split(":")

        if len(parts) != 4 or parts[0] != RateCacheKey.PREFIX:
            raise ValueError(
                f"Invalid cache key format: {cache_key}. "
                f"Expected '{RateCacheKey.PREFIX}' followed by 3 parts separated by ':'"
            )

        unescape = RateCacheKey._unescape
        return {
            "period": unescape(parts[1]),
            "hotel": unescape(parts[2]),
            "room": unescape(parts[3]),
        }

