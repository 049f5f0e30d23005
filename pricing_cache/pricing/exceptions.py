"""
Error vocabulary for pricing rate resolution.

User-facing failures are deliberately coarse: callers only ever see one
of the two RateErrorCode messages. Exceptions in this module are
internal and never cross the resolver boundary.
"""

from enum import Enum
from typing import Optional


class RateErrorCode(str, Enum):
    """
    User-facing error codes returned in a ResolutionResult.

    RATE_NOT_FOUND: upstream is healthy but has no entry for the triple.
    RATE_UNAVAILABLE: upstream failure, timeout, malformed response or
        any unexpected internal error.
    """

    RATE_NOT_FOUND = "Rate not found"
    RATE_UNAVAILABLE = "Rate unavailable"


class PricingError(Exception):
    """Base exception for pricing cache errors."""


class RateAPIError(PricingError):
    """
    Raised when the upstream pricing API cannot be reached.

    Non-success HTTP statuses are not errors at this level; they are
    reported through RateApiResponse.success.
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        """
        Initialize RateAPIError.

        Args:
            message: Error description
            status_code: Optional HTTP status code, when one was received
        """
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class ConfigurationError(PricingError):
    """Raised when service settings are missing or inconsistent."""
