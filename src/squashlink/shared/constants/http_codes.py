"""HTTP Status Code Constants.

This module contains HTTP status code constants for clear and
type-safe handling of API responses and network operations.
"""

from typing import ClassVar


class HTTPStatusCodes:
    """HTTP status code constants."""

    # 2xx Success
    OK = 200
    NO_CONTENT = 204

    # 4xx Client Errors
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    TOO_MANY_REQUESTS = 429

    # 5xx Server Errors
    INTERNAL_SERVER_ERROR = 500
    BAD_GATEWAY = 502
    SERVICE_UNAVAILABLE = 503
    GATEWAY_TIMEOUT = 504

    AUTH_REJECTED: ClassVar[frozenset[int]] = frozenset({UNAUTHORIZED, FORBIDDEN})
    RETRYABLE_SERVER: ClassVar[frozenset[int]] = frozenset(
        {BAD_GATEWAY, SERVICE_UNAVAILABLE, GATEWAY_TIMEOUT}
    )

    @staticmethod
    def is_success(code: int) -> bool:
        """Check if status code indicates success (2xx)."""
        return 200 <= code < 300


class HTTPHeaders:
    """Common HTTP header names."""

    CONTENT_TYPE = "Content-Type"
    ACCEPT = "Accept"
    AUTHORIZATION = "Authorization"
    RETRY_AFTER = "Retry-After"


class ContentTypes:
    """Common content type values."""

    JSON = "application/json"


__all__ = [
    "ContentTypes",
    "HTTPHeaders",
    "HTTPStatusCodes",
]
