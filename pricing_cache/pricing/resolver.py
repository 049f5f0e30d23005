"""
Read-through rate resolution.

RateResolver serves rates from the shared cache and recomputes them on
a miss through a per-key lock, so that a burst of requests for one cold
rate triggers a single upstream call.
"""

from typing import TYPE_CHECKING, Any, List, Optional

from pricing_cache.cache.store import CacheStore
from pricing_cache.cache.ttl import CacheTTL
from pricing_cache.models.rates import FetchStatus, RateRequest, ResolutionResult
from pricing_cache.pricing.exceptions import RateErrorCode
from pricing_cache.pricing.fetcher import RateClient, coerce_rate, fetch_and_validate
from pricing_cache.utils.logger import get_logger, log_event

if TYPE_CHECKING:  # pragma: no cover
    from pricing_cache.config import PricingSettings

logger = get_logger(__name__)


class RateResolver:
    """
    Resolve rates through the cache, falling back to the pricing API.

    resolve() never raises: every failure ends up as an error message in
    the returned ResolutionResult.

    Attributes:
        store: Shared cache store
        client: Upstream pricing client
        freshness_window: Seconds a fetched rate is served as a hit
        grace_window: Stale-serving and lock-wait window in seconds
        api_timeout: Seconds allowed for one upstream call
    """

    SERVICE_NAME = "RateResolver"

    def __init__(
        self,
        store: CacheStore,
        client: RateClient,
        freshness_window: int = CacheTTL.RATE_FRESHNESS.value,
        grace_window: int = CacheTTL.GRACE_WINDOW.value,
        api_timeout: float = CacheTTL.API_TIMEOUT.value,
    ) -> None:
        self.store = store
        self.client = client
        self.freshness_window = freshness_window
        self.grace_window = grace_window
        self.api_timeout = api_timeout

    @classmethod
    def from_settings(
        cls, store: CacheStore, client: RateClient, settings: "PricingSettings"
    ) -> "RateResolver":
        return cls(
            store,
            client,
            freshness_window=settings.freshness_window_seconds,
            grace_window=settings.grace_window_seconds,
            api_timeout=settings.api_timeout_seconds,
        )

    def _bind_logger(self, request: RateRequest, cache_key: str) -> Any:
        try:
            return logger.bind(
                service=self.SERVICE_NAME,
                cache_key=cache_key,
                period=request.period,
                hotel=request.hotel,
                room=request.room,
            )
        except Exception:  # noqa: BLE001 - fall back to the unbound logger
            return logger

    async def resolve(self, request: RateRequest) -> ResolutionResult:
        """
        Resolve the rate of one (period, hotel, room) triple.

        Args:
            request: Rate triple

        Returns:
            ResolutionResult with either a rate or a non-empty error list

        Example:
            >>> result = await resolver.resolve(
            ...     RateRequest(period="Summer", hotel="FloatingPointResort", room="SingletonRoom")
            ... )
            >>> result.rate
            15000
        """
        cache_key = request.cache_key
        log = self._bind_logger(request, cache_key)
        errors: List[str] = []

        rate = await self._read_cached(cache_key, log)
        if rate is not None:
            log_event(log, "info", "cache_hit")
            return ResolutionResult(rate=rate)

        log_event(log, "info", "cache_miss")
        computed = False

        async def compute() -> Optional[int]:
            nonlocal computed
            computed = True

            outcome = await fetch_and_validate(self.client, request, self.api_timeout, log)

            if outcome.status is FetchStatus.SUCCESS:
                log_event(log, "info", "cache_set", ttl=self.freshness_window)
                return outcome.rate

            errors.append(outcome.error_code.value)
            log_event(log, "warning", "skip_caching_nil", reason=outcome.reason)
            return None

        try:
            value = await self.store.fetch_or_compute_with_lock(
                cache_key,
                self.freshness_window,
                self.grace_window,
                compute,
                usable=self._is_rate,
            )
            rate = self._as_rate(value)
        except Exception as e:
            log_event(
                log,
                "error",
                "unexpected_error",
                message=str(e),
                error_type=type(e).__name__,
            )
            rate = None

        if rate is not None:
            if not computed:
                # Filled by a concurrent caller, or a stale fallback
                log_event(log, "info", "cache_hit", shared=True)
            return ResolutionResult(rate=rate)

        if not errors:
            errors.append(RateErrorCode.RATE_UNAVAILABLE.value)

        return ResolutionResult(rate=None, errors=errors)

    async def _read_cached(self, cache_key: str, log: Any) -> Optional[int]:
        try:
            return self._as_rate(await self.store.get(cache_key))
        except Exception as e:
            log_event(
                log,
                "error",
                "cache_read_error",
                message=str(e),
                error_type=type(e).__name__,
            )
            return None

    @staticmethod
    def _as_rate(value: Any) -> Optional[int]:
        """Cached values are read with the same rules as upstream rates."""
        try:
            return coerce_rate(value)
        except (TypeError, ValueError):
            return None

    @classmethod
    def _is_rate(cls, value: Any) -> bool:
        return cls._as_rate(value) is not None
