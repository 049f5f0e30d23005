"""
Pydantic models for pricing rate resolution.

Defines the request triple, the resolution result returned to callers,
and the explicit outcome of one upstream fetch.
"""
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from pricing_cache.cache.keys import RateCacheKey
from pricing_cache.pricing.exceptions import RateErrorCode


class RateRequest(BaseModel):
    """
    Immutable (period, hotel, room) triple identifying one price.

    Fields are free-form identifiers; only presence is validated.
    """

    model_config = ConfigDict(frozen=True)

    period: str = Field(..., min_length=1, description="Pricing period")
    hotel: str = Field(..., min_length=1, description="Hotel identifier")
    room: str = Field(..., min_length=1, description="Room identifier")

    @property
    def cache_key(self) -> str:
        """Cache key of this triple."""
        return RateCacheKey.generate(self.period, self.hotel, self.room)


class ResolutionResult(BaseModel):
    """
    Outcome of resolving one rate.

    Exactly one of "rate is present" and "errors is non-empty" holds.
    """

    rate: Optional[int] = Field(
        None,
        description="Rate in the smallest currency unit",
    )
    errors: List[str] = Field(
        default_factory=list,
        description="User-facing error messages",
    )

    @model_validator(mode="after")
    def check_exclusive(self) -> "ResolutionResult":
        """Enforce rate XOR errors."""
        if (self.rate is None) == (not self.errors):
            raise ValueError("a resolution carries either a rate or errors, not both or neither")
        return self

    @property
    def valid(self) -> bool:
        return self.rate is not None

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"rate": 15000, "errors": []},
                {"rate": None, "errors": ["Rate not found"]},
            ]
        }
    )


class FetchStatus(str, Enum):
    """Kinds of upstream fetch outcome."""

    SUCCESS = "success"
    NOT_FOUND = "not_found"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class FetchOutcome:
    """
    Result of one upstream fetch-and-validate.

    reason is for logs only and never reaches the caller.
    """

    status: FetchStatus
    rate: Optional[int] = None
    reason: Optional[str] = None

    @classmethod
    def success(cls, rate: int) -> "FetchOutcome":
        return cls(FetchStatus.SUCCESS, rate=rate)

    @classmethod
    def not_found(cls) -> "FetchOutcome":
        return cls(FetchStatus.NOT_FOUND, reason="no_matching_rate")

    @classmethod
    def unavailable(cls, reason: str) -> "FetchOutcome":
        return cls(FetchStatus.UNAVAILABLE, reason=reason)

    @property
    def error_code(self) -> Optional[RateErrorCode]:
        """User-facing error for failed outcomes, None on success."""
        if self.status is FetchStatus.NOT_FOUND:
            return RateErrorCode.RATE_NOT_FOUND
        if self.status is FetchStatus.UNAVAILABLE:
            return RateErrorCode.RATE_UNAVAILABLE
        return None
