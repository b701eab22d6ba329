"""
Network Configuration Constants

This module contains all constants related to the resilient HTTP client:
timeouts, retry/backoff settings and circuit breaker defaults.
"""


class NetworkConfig:
    """Network configuration constants (milliseconds unless noted)."""

    # Timeout settings
    DEFAULT_TIMEOUT_MS = 10_000
    HEALTH_CHECK_TIMEOUT_MS = 5_000

    # Retry settings
    DEFAULT_MAX_ATTEMPTS = 3
    DEFAULT_BASE_DELAY_MS = 1_000
    DEFAULT_MAX_DELAY_MS = 8_000
    DEFAULT_JITTER = True
    JITTER_SPAN_MS = 1_000


class CircuitBreakerConfig:
    """Circuit breaker defaults."""

    DEFAULT_FAILURE_THRESHOLD = 5
    DEFAULT_COOLDOWN_MS = 60_000


__all__ = [
    "CircuitBreakerConfig",
    "NetworkConfig",
]
