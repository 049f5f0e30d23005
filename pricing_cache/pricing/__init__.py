"""
Upstream pricing integration and rate resolution.

This package provides:
- RateApiClient: httpx client for the upstream pricing API
- The RateErrorCode vocabulary and internal exceptions
- fetch_and_validate (pricing_cache.pricing.fetcher)
- RateResolver (pricing_cache.pricing.resolver)

Example:
    >>> from pricing_cache.pricing.resolver import RateResolver
    >>> resolver = RateResolver(store, client)
    >>> result = await resolver.resolve(RateRequest(period="Summer", hotel="H", room="R"))
"""

from pricing_cache.pricing.exceptions import (
    ConfigurationError,
    PricingError,
    RateAPIError,
    RateErrorCode,
)
from pricing_cache.pricing.client import RateApiClient, RateApiResponse

__all__ = [
    # Client
    "RateApiClient",
    "RateApiResponse",
    # Errors
    "RateErrorCode",
    "PricingError",
    "RateAPIError",
    "ConfigurationError",
]
