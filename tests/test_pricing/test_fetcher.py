"""Unit tests for upstream fetch and validation."""

import asyncio
import json
from unittest.mock import AsyncMock

import httpx
import pytest
from structlog.testing import capture_logs

from pricing_cache.models.rates import FetchStatus, RateRequest
from pricing_cache.pricing.client import RateApiResponse
from pricing_cache.pricing.exceptions import RateAPIError, RateErrorCode
from pricing_cache.pricing.fetcher import coerce_rate, fetch_and_validate, find_rate

REQUEST = RateRequest(period="Summer", hotel="FloatingPointResort", room="SingletonRoom")


def ok(payload) -> RateApiResponse:
    body = payload if isinstance(payload, bytes) else json.dumps(payload).encode()
    return RateApiResponse(success=True, status_code=200, body=body)


def entry(period="Summer", hotel="FloatingPointResort", room="SingletonRoom", rate="15000"):
    return {"period": period, "hotel": hotel, "room": room, "rate": rate}


def client_returning(response):
    client = AsyncMock()
    client.get_rate = AsyncMock(return_value=response)
    return client


class TestCoerceRate:
    """Test suite for coerce_rate()."""

    @pytest.mark.parametrize(
        "value,expected",
        [(15000, 15000), ("15000", 15000), (" 15000 ", 15000), (15000.0, 15000), ("15000.75", 15000)],
    )
    def test_numeric_values(self, value, expected):
        assert coerce_rate(value) == expected

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_empty_values(self, value):
        assert coerce_rate(value) is None

    @pytest.mark.parametrize("value", ["abc", "NaN", "Infinity", "1e3", "15000abc", "0x10"])
    def test_non_numeric_strings(self, value):
        with pytest.raises(ValueError):
            coerce_rate(value)

    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_non_finite_floats(self, value):
        with pytest.raises(ValueError):
            coerce_rate(value)

    @pytest.mark.parametrize("value", [True, [15000], {"amount": 15000}])
    def test_unsupported_types(self, value):
        with pytest.raises(TypeError):
            coerce_rate(value)


class TestFindRate:
    """Test suite for find_rate()."""

    def test_first_match_wins(self):
        payload = {"rates": [entry(rate="1"), entry(rate="2")]}

        assert find_rate(payload, REQUEST) == "1"

    def test_all_fields_must_match(self):
        payload = {
            "rates": [
                entry(period="Winter", rate="1"),
                entry(hotel="OtherHotel", rate="2"),
                entry(room="OtherRoom", rate="3"),
                entry(rate="4"),
            ]
        }

        assert find_rate(payload, REQUEST) == "4"

    def test_missing_rates_list(self):
        assert find_rate({}, REQUEST) is None

    def test_non_dict_entries_skipped(self):
        assert find_rate({"rates": ["junk", entry()]}, REQUEST) == "15000"

    def test_unexpected_shape(self):
        with pytest.raises(TypeError):
            find_rate([entry()], REQUEST)
        with pytest.raises(TypeError):
            find_rate({"rates": "nope"}, REQUEST)


class TestFetchAndValidate:
    """Test suite for fetch_and_validate()."""

    @pytest.mark.asyncio
    async def test_success(self):
        """Test a matching entry yields its integer rate."""
        client = client_returning(ok({"rates": [entry()]}))

        outcome = await fetch_and_validate(client, REQUEST, timeout=1)

        assert outcome.status is FetchStatus.SUCCESS
        assert outcome.rate == 15000
        assert outcome.error_code is None
        client.get_rate.assert_awaited_once_with("Summer", "FloatingPointResort", "SingletonRoom")

    @pytest.mark.asyncio
    async def test_no_match_is_not_found(self):
        """Test a healthy response without the triple is RATE_NOT_FOUND."""
        client = client_returning(
            ok({"rates": [entry(period="Winter", hotel="OtherHotel", room="OtherRoom", rate="99999")]})
        )

        outcome = await fetch_and_validate(client, REQUEST, timeout=1)

        assert outcome.status is FetchStatus.NOT_FOUND
        assert outcome.error_code is RateErrorCode.RATE_NOT_FOUND

    @pytest.mark.asyncio
    async def test_match_without_rate_is_not_found(self):
        """Test a matching entry with an empty rate is RATE_NOT_FOUND."""
        client = client_returning(ok({"rates": [entry(rate=None)]}))

        outcome = await fetch_and_validate(client, REQUEST, timeout=1)

        assert outcome.status is FetchStatus.NOT_FOUND

    @pytest.mark.asyncio
    async def test_api_failure(self):
        """Test a non-success status is unavailable and logs api_failure."""
        client = client_returning(RateApiResponse(success=False, status_code=500, body=b"boom"))

        with capture_logs() as logs:
            outcome = await fetch_and_validate(client, REQUEST, timeout=1)

        assert outcome.status is FetchStatus.UNAVAILABLE
        assert outcome.error_code is RateErrorCode.RATE_UNAVAILABLE
        failure = [log for log in logs if log["event"] == "api_failure"]
        assert failure and failure[0]["status_code"] == 500

    @pytest.mark.asyncio
    async def test_timeout(self):
        """Test a slow upstream is abandoned after the timeout."""

        async def slow_get_rate(*args):
            await asyncio.sleep(1)
            return ok({"rates": [entry()]})

        client = AsyncMock()
        client.get_rate = slow_get_rate

        with capture_logs() as logs:
            outcome = await fetch_and_validate(client, REQUEST, timeout=0.01)

        assert outcome.status is FetchStatus.UNAVAILABLE
        assert outcome.reason == "api_timeout"
        assert any(log["event"] == "api_timeout" for log in logs)

    @pytest.mark.asyncio
    async def test_transport_timeout(self):
        """Test httpx timeouts map to api_timeout too."""
        client = AsyncMock()
        client.get_rate = AsyncMock(side_effect=httpx.ReadTimeout("timed out"))

        outcome = await fetch_and_validate(client, REQUEST, timeout=1)

        assert outcome.reason == "api_timeout"

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        """Test a malformed body is unavailable and logs invalid_json."""
        client = client_returning(ok(b"invalid json"))

        with capture_logs() as logs:
            outcome = await fetch_and_validate(client, REQUEST, timeout=1)

        assert outcome.status is FetchStatus.UNAVAILABLE
        assert outcome.reason == "invalid_json"
        assert any(log["event"] == "invalid_json" for log in logs)

    @pytest.mark.asyncio
    async def test_unexpected_shape(self):
        """Test an unexpected payload shape is unavailable, detail only in logs."""
        client = client_returning(ok([1, 2, 3]))

        with capture_logs() as logs:
            outcome = await fetch_and_validate(client, REQUEST, timeout=1)

        assert outcome.status is FetchStatus.UNAVAILABLE
        assert outcome.reason == "unexpected_error"
        unexpected = [log for log in logs if log["event"] == "unexpected_error"]
        assert "expected a JSON object" in unexpected[0]["message"]

    @pytest.mark.asyncio
    async def test_uncoercible_rate(self):
        """Test a non-numeric rate is unavailable."""
        client = client_returning(ok({"rates": [entry(rate="fifteen thousand")]}))

        outcome = await fetch_and_validate(client, REQUEST, timeout=1)

        assert outcome.reason == "unexpected_error"

    @pytest.mark.asyncio
    async def test_transport_error(self):
        """Test an unreachable upstream is unavailable."""
        client = AsyncMock()
        client.get_rate = AsyncMock(side_effect=RateAPIError("connection refused"))

        outcome = await fetch_and_validate(client, REQUEST, timeout=1)

        assert outcome.status is FetchStatus.UNAVAILABLE
        assert outcome.reason == "unexpected_error"
