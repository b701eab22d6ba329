"""SquashTM API configuration models.

This module contains the connection, retry, circuit breaker and fallback
settings used by the resilient access layer.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator, model_validator

from squashlink.shared.constants import (
    CircuitBreakerConfig,
    FallbackPolicy,
    NetworkConfig,
    SquashAPIConfig,
)


class RetrySettings(BaseModel):
    """Retry and backoff configuration for a single logical request."""

    max_attempts: int = Field(
        default=NetworkConfig.DEFAULT_MAX_ATTEMPTS,
        ge=1,
        description="Total number of attempts per request (first try included)",
    )
    base_delay_ms: int = Field(
        default=NetworkConfig.DEFAULT_BASE_DELAY_MS,
        ge=0,
        description="Backoff delay before the second attempt in milliseconds",
    )
    max_delay_ms: int = Field(
        default=NetworkConfig.DEFAULT_MAX_DELAY_MS,
        ge=0,
        description="Upper bound of the exponential backoff in milliseconds",
    )
    jitter: bool = Field(
        default=NetworkConfig.DEFAULT_JITTER,
        description="Add up to one second of random delay to each backoff",
    )

    @model_validator(mode="after")
    def _check_delay_bounds(self) -> RetrySettings:
        if self.max_delay_ms < self.base_delay_ms:
            msg = "max_delay_ms must be greater than or equal to base_delay_ms"
            raise ValueError(msg)
        return self


class CircuitSettings(BaseModel):
    """Circuit breaker configuration."""

    failure_threshold: int = Field(
        default=CircuitBreakerConfig.DEFAULT_FAILURE_THRESHOLD,
        ge=1,
        description="Consecutive terminal failures that open the circuit",
    )
    cooldown_ms: int = Field(
        default=CircuitBreakerConfig.DEFAULT_COOLDOWN_MS,
        ge=0,
        description="How long an open circuit withholds traffic in milliseconds",
    )


class SquashSettings(BaseModel):
    """SquashTM connection configuration.

    Security: token is masked in __repr__. It is only ever read from the
    environment, a .env file or a TOML config file, never from source.
    """

    base_url: str = Field(
        default=SquashAPIConfig.DEFAULT_BASE_URL,
        description="Base URL of the SquashTM REST API (without trailing slash)",
    )

    # Bearer token (sensitive - hidden from repr)
    token: str = Field(
        default="",
        repr=False,
        description="SquashTM API bearer token (JWT)",
    )

    timeout_ms: int = Field(
        default=NetworkConfig.DEFAULT_TIMEOUT_MS,
        gt=0,
        description="Per-attempt request timeout in milliseconds",
    )
    health_timeout_ms: int = Field(
        default=NetworkConfig.HEALTH_CHECK_TIMEOUT_MS,
        gt=0,
        description="Timeout of the health check request in milliseconds",
    )

    retry: RetrySettings = Field(default_factory=RetrySettings)
    circuit: CircuitSettings = Field(default_factory=CircuitSettings)

    fallback_policy: FallbackPolicy = Field(
        default=FallbackPolicy.STICKY,
        description="When to serve the built-in sample dataset instead of live data",
    )

    projects_page_size: int = Field(default=SquashAPIConfig.PROJECTS_PAGE_SIZE, gt=0)
    folders_page_size: int = Field(default=SquashAPIConfig.FOLDERS_PAGE_SIZE, gt=0)
    test_cases_page_size: int = Field(default=SquashAPIConfig.TEST_CASES_PAGE_SIZE, gt=0)

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    def __repr__(self) -> str:
        masked_token = "****" if self.token else "[empty]"
        return (
            f"SquashSettings("
            f"base_url={self.base_url!r}, "
            f"token={masked_token}, "
            f"timeout_ms={self.timeout_ms}, "
            f"fallback_policy={self.fallback_policy.value})"
        )


__all__ = [
    "CircuitSettings",
    "RetrySettings",
    "SquashSettings",
]
