"""
Pydantic response models for the MCP tools.

Defines standardized response structures for rate lookups, error
responses and health checks.
"""
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field


class ResponseMetadata(BaseModel):
    """
    Metadata included in all rate responses.
    """

    cache_key: str = Field(
        ...,
        description="Cache key of the requested rate triple",
    )
    freshness_window_seconds: int = Field(
        0,
        ge=0,
        description="Maximum age of a served rate in seconds",
    )
    execution_time_ms: float = Field(
        ...,
        ge=0,
        description="Tool execution time in milliseconds",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "cache_key": "pricing_rate:Summer:FloatingPointResort:SingletonRoom",
                "freshness_window_seconds": 300,
                "execution_time_ms": 3.2,
            }
        }
    )


# Generic type for tool result data
T = TypeVar("T")


class ToolResponse(BaseModel, Generic[T]):
    """
    Generic response wrapper for all MCP tools.

    Type Parameters:
        T: Type of the data field (tool-specific)
    """

    data: T = Field(
        ...,
        description="Tool-specific result data",
    )
    metadata: ResponseMetadata = Field(
        ...,
        description="Response metadata",
    )


class RateData(BaseModel):
    """Payload of a successful rate lookup."""

    period: str
    hotel: str
    room: str
    rate: int = Field(..., description="Rate in the smallest currency unit")


class ErrorResponse(BaseModel):
    """
    Standardized error response structure.

    Codes follow HTTP semantics so that an HTTP front end can pass them
    through: 404 for an unknown rate, 503 for a retryable outage, 422
    for invalid parameters.

    Attributes:
        code: Error code
        message: Human-readable error message
        data: Optional additional error context
    """

    code: int = Field(
        ...,
        description="Error code",
    )
    message: str = Field(
        ...,
        min_length=1,
        description="Human-readable error message",
    )
    data: dict[str, Any] | None = Field(
        None,
        description="Additional error context",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "code": 503,
                "message": "Rate unavailable",
                "data": {"retry_after_seconds": 10},
            }
        }
    )


class HealthCheckResponse(BaseModel):
    """
    Health check response.

    Used to verify server is running and components are healthy.
    """

    status: str = Field(
        ...,
        description="Overall health status (healthy, degraded, unhealthy)",
    )
    version: str = Field(
        ...,
        description="Server version",
    )
    components: dict[str, str] = Field(
        ...,
        description="Health status of individual components",
    )
