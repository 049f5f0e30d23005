"""
Runtime configuration for the pricing cache service.

Settings are read from environment variables once at startup and
passed explicitly to the components that need them.
"""
import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, model_validator

from pricing_cache.cache.ttl import CacheTTL
from pricing_cache.pricing.exceptions import ConfigurationError


class PricingSettings(BaseModel):
    """
    Validated service settings.

    The grace window trades staleness for upstream load: a longer window
    lets more concurrent callers take a slightly old rate instead of
    waiting on the per-key lock.
    """

    redis_url: str = Field(
        "redis://localhost:6379/0",
        description="Redis connection URL for the shared rate cache",
    )
    rate_api_url: str = Field(
        "http://localhost:8080",
        description="Base URL of the upstream pricing API",
    )
    rate_api_token: Optional[str] = Field(
        None,
        description="Token sent to the upstream pricing API",
    )
    freshness_window_seconds: int = Field(
        CacheTTL.RATE_FRESHNESS.value,
        gt=0,
        description="Maximum age of a rate served as a cache hit",
    )
    grace_window_seconds: int = Field(
        CacheTTL.GRACE_WINDOW.value,
        gt=0,
        description="Stale-serving and lock-wait window",
    )
    lock_timeout_seconds: float = Field(
        CacheTTL.LOCK_TIMEOUT.value,
        gt=0,
        description="Auto-release time of the per-key compute lock",
    )
    api_timeout_seconds: float = Field(
        CacheTTL.API_TIMEOUT.value,
        gt=0,
        description="Timeout applied to each upstream pricing call",
    )
    log_level: str = Field("INFO", description="Log level name")
    environment: str = Field("production", description="Deployment environment")
    mcp_transport: str = Field("stdio", description="FastMCP transport")

    @model_validator(mode="after")
    def check_windows(self) -> "PricingSettings":
        """Reject timing combinations that break the freshness guarantees."""
        if self.grace_window_seconds >= self.freshness_window_seconds:
            raise ValueError(
                "grace_window_seconds must be shorter than freshness_window_seconds"
            )
        if self.lock_timeout_seconds < self.api_timeout_seconds:
            raise ValueError(
                "lock_timeout_seconds must not be shorter than api_timeout_seconds"
            )
        return self

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "PricingSettings":
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            Validated PricingSettings

        Raises:
            ConfigurationError: If a variable is malformed or the timing
                combination is invalid
        """
        env = os.environ if environ is None else environ

        env_map = {
            "redis_url": "REDIS_URL",
            "rate_api_url": "RATE_API_URL",
            "rate_api_token": "RATE_API_TOKEN",
            "freshness_window_seconds": "PRICING_CACHE_TTL_SECONDS",
            "grace_window_seconds": "PRICING_GRACE_WINDOW_SECONDS",
            "lock_timeout_seconds": "PRICING_LOCK_TIMEOUT_SECONDS",
            "api_timeout_seconds": "RATE_API_TIMEOUT_SECONDS",
            "log_level": "LOG_LEVEL",
            "environment": "ENVIRONMENT",
            "mcp_transport": "MCP_TRANSPORT",
        }
        values = {field: env[var] for field, var in env_map.items() if env.get(var)}

        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid pricing cache settings: {e}") from e
