"""SquashLink services.

The resilient access layer: token inspection, circuit breaker, retry
policy, HTTP client, fallback dataset and the typed SquashTM service.
"""

from .circuit_breaker import CircuitBreaker, CircuitStatus
from .fallback import FallbackDataSource, FallbackSwitch
from .http_client import ResilientHttpClient
from .retry_policy import RetryPolicy
from .squash_service import SquashApiService
from .token_lifecycle import TokenContext, TokenInfo, decode_claims

__all__ = [
    "CircuitBreaker",
    "CircuitStatus",
    "FallbackDataSource",
    "FallbackSwitch",
    "ResilientHttpClient",
    "RetryPolicy",
    "SquashApiService",
    "TokenContext",
    "TokenInfo",
    "decode_claims",
]
