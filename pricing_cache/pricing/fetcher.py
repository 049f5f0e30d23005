"""
Upstream fetch and response validation.

Turns one upstream call into a FetchOutcome. Every failure class maps
to an outcome value; details go to the log, never to the caller.
"""

import asyncio
import json
import re
from decimal import Decimal
from typing import Any, Optional, Protocol

import httpx

from pricing_cache.models.rates import FetchOutcome, RateRequest
from pricing_cache.pricing.client import RateApiResponse
from pricing_cache.utils.logger import get_logger, log_event

logger = get_logger(__name__)

DECIMAL_RATE = re.compile(r"[+-]?\d+(?:\.\d*)?")


class RateClient(Protocol):
    """Capability of the upstream pricing client."""

    async def get_rate(self, period: str, hotel: str, room: str) -> RateApiResponse:
        ...


def coerce_rate(value: Any) -> Optional[int]:
    """
    Coerce an upstream rate field to an integer.

    Accepts integers, floats and plain decimal strings such as "15000" or
    "15000.75"; fractional values are truncated. Exponent notation
    ("1e3"), NaN and infinities are rejected. Empty values mean "no rate".

    Returns:
        Integer rate, or None for a missing/empty value

    Raises:
        ValueError: If the value is not numeric
        TypeError: If the value has an unsupported type
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return None

    if isinstance(value, bool):
        raise TypeError("rate must be numeric, got bool")

    if isinstance(value, int):
        return value

    if isinstance(value, float):
        try:
            return int(value)
        except OverflowError as e:
            raise ValueError(f"rate is not finite: {value!r}") from e

    if isinstance(value, str):
        text = value.strip()
        if not DECIMAL_RATE.fullmatch(text):
            raise ValueError(f"rate is not numeric: {value!r}")
        return int(Decimal(text))

    raise TypeError(f"rate must be numeric, got {type(value).__name__}")


def find_rate(payload: Any, request: RateRequest) -> Optional[Any]:
    """
    Return the raw rate of the first entry matching the request triple.

    Raises:
        TypeError: If the payload does not have the expected shape
    """
    if not isinstance(payload, dict):
        raise TypeError(f"expected a JSON object, got {type(payload).__name__}")

    rates = payload.get("rates")
    if rates is None:
        return None
    if not isinstance(rates, list):
        raise TypeError(f"expected 'rates' to be a list, got {type(rates).__name__}")

    for entry in rates:
        if not isinstance(entry, dict):
            continue
        if (
            entry.get("period") == request.period
            and entry.get("hotel") == request.hotel
            and entry.get("room") == request.room
        ):
            return entry.get("rate")

    return None


async def fetch_and_validate(
    client: RateClient,
    request: RateRequest,
    timeout: float,
    log: Any = None,
) -> FetchOutcome:
    """
    Call the upstream pricing API and extract a valid rate.

    Args:
        client: Upstream pricing client
        request: Rate triple to look up
        timeout: Seconds before the call is abandoned
        log: Logger bound with the request context

    Returns:
        FetchOutcome: success with the rate, not found, or unavailable
    """
    log = log or logger

    try:
        response = await asyncio.wait_for(
            client.get_rate(request.period, request.hotel, request.room),
            timeout=timeout,
        )

        if not response.success:
            log_event(log, "error", "api_failure", status_code=response.status_code)
            return FetchOutcome.unavailable("api_failure")

        try:
            payload = json.loads(response.body)
        except ValueError as e:
            log_event(log, "error", "invalid_json", error=str(e))
            return FetchOutcome.unavailable("invalid_json")

        rate = coerce_rate(find_rate(payload, request))

        if rate is None:
            return FetchOutcome.not_found()

        return FetchOutcome.success(rate)

    except (asyncio.TimeoutError, httpx.TimeoutException):
        log_event(log, "error", "api_timeout", timeout=timeout)
        return FetchOutcome.unavailable("api_timeout")

    except Exception as e:
        log_event(
            log,
            "error",
            "unexpected_error",
            message=str(e),
            error_type=type(e).__name__,
        )
        return FetchOutcome.unavailable("unexpected_error")
