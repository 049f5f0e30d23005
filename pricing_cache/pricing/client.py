"""
Upstream pricing API client.

Wraps one httpx.AsyncClient. Non-success statuses are reported in the
response object rather than raised; only transport failures raise.
"""

from dataclasses import dataclass
from typing import Optional

import httpx
import structlog

from pricing_cache.pricing.exceptions import RateAPIError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RateApiResponse:
    """Raw upstream response: success flag, status and undecoded body."""

    success: bool
    status_code: int
    body: bytes


class RateApiClient:
    """
    Client for the upstream pricing API.

    Example:
        >>> client = RateApiClient("http://rate-api:8080", token="secret")
        >>> response = await client.get_rate("Summer", "FloatingPointResort", "SingletonRoom")
        >>> response.success
        True
    """

    PRICING_PATH = "/pricing"

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: Base URL of the pricing API
            token: Value of the "token" header, when the API requires one
            timeout: Transport-level timeout in seconds
            transport: Optional httpx transport (tests use MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        headers = {"Content-Type": "application/json"}
        if token:
            headers["token"] = token

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def get_rate(self, period: str, hotel: str, room: str) -> RateApiResponse:
        """
        Request the rate of one (period, hotel, room) triple.

        Returns:
            RateApiResponse; success is False for any non-2xx status

        Raises:
            httpx.TimeoutException: If the transport times out
            RateAPIError: If the API cannot be reached
        """
        payload = {"attributes": [{"period": period, "hotel": hotel, "room": room}]}

        try:
            response = await self._client.post(self.PRICING_PATH, json=payload)
        except httpx.TimeoutException:
            raise
        except httpx.HTTPError as e:
            logger.error(
                "rate_api_request_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RateAPIError(f"Rate API request failed: {e}") from e

        logger.debug(
            "rate_api_response",
            status_code=response.status_code,
            body_size=len(response.content),
        )

        return RateApiResponse(
            success=response.is_success,
            status_code=response.status_code,
            body=response.content,
        )

    async def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._client.aclose()
