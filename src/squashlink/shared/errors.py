"""SquashLink errors.

Every failure carries an ErrorCode and a frozen, log-safe ErrorContext.
The families (security, infrastructure, network, application, domain)
decide how callers react: the fallback data source trips on network
failures, the CLI maps each family to an exit code.

Only terminal errors leave the access layer. Retryable conditions
(429, 502/503/504, timeouts, connection failures) are absorbed by the
HTTP client until its retry budget is exhausted.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, Union

from squashlink.shared.constants.api import SquashErrorMessages

# Type alias for primitive context values (str, int, float, bool only)
PrimitiveContextValue = Union[str, int, float, bool]

# Default keys to mask in safe_dict
SAFE_DICT_MASK_KEYS: tuple[str, ...] = ("user_id",)


class ErrorCode(str, Enum):
    """Machine-readable failure codes, also emitted by the CLI in --json mode."""

    # Network and API Errors
    NETWORK_ERROR = "NETWORK_ERROR"
    API_RATE_LIMIT = "API_RATE_LIMIT"
    API_AUTHENTICATION_FAILED = "API_AUTHENTICATION_FAILED"
    API_REQUEST_FAILED = "API_REQUEST_FAILED"
    API_TIMEOUT = "API_TIMEOUT"
    API_SERVER_ERROR = "API_SERVER_ERROR"
    API_INVALID_RESPONSE = "API_INVALID_RESPONSE"
    CIRCUIT_OPEN = "CIRCUIT_OPEN"

    # Security Errors
    TOKEN_EXPIRED = "TOKEN_EXPIRED"  # noqa: S105  # nosec B105 - Error code constant
    TOKEN_MALFORMED = "TOKEN_MALFORMED"  # noqa: S105  # nosec B105 - Error code constant
    TOKEN_MISSING = "TOKEN_MISSING"  # noqa: S105  # nosec B105 - Error code constant

    # Validation Errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Configuration Errors
    CONFIG_ERROR = "CONFIG_ERROR"
    CONFIG_INVALID = "CONFIG_INVALID"
    FILE_READ_ERROR = "FILE_READ_ERROR"

    # Domain Errors
    NODE_NOT_FOUND = "NODE_NOT_FOUND"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"

    # CLI Errors
    CLI_UNEXPECTED_ERROR = "CLI_UNEXPECTED_ERROR"
    CLI_COMMAND_FAILED = "CLI_COMMAND_FAILED"


def _coerce_primitives(value: Any | None) -> dict[str, PrimitiveContextValue] | None:
    """Turn Path, Enum and Decimal values into str/int/float/bool.

    Raises:
        TypeError: For a non-dict value or a value of any other type
    """
    if value is None:
        return None

    if not isinstance(value, dict):
        error_msg = f"additional_data must be dict, got {type(value).__name__}"
        raise TypeError(error_msg)

    coerced: dict[str, PrimitiveContextValue] = {}
    for key, val in value.items():
        if isinstance(val, (str, int, float, bool)):
            coerced[key] = val
        elif isinstance(val, Path):
            coerced[key] = str(val)
        elif isinstance(val, Enum):
            coerced[key] = val.value
        elif isinstance(val, Decimal):
            coerced[key] = float(val)
        else:
            error_msg = (
                f"Cannot coerce {type(val).__name__} to primitive type. "
                f"Only str, int, float, bool, Path, Enum, Decimal are allowed."
            )
            raise TypeError(error_msg)

    return coerced


@dataclass(frozen=True)
class ErrorContextModel:
    """Context information for errors.

    Only primitive types (str, int, float, bool) are allowed in
    additional_data so contexts are always safe to serialize into logs.

    Attributes:
        operation: Optional operation name that caused the error
        endpoint: Optional API endpoint involved in the error
        user_id: Optional user ID (masked in logs)
        additional_data: Optional dict with primitive values only
    """

    operation: str | None = None
    endpoint: str | None = None
    user_id: str | None = None
    additional_data: dict[str, PrimitiveContextValue] | None = None

    def __post_init__(self) -> None:
        if self.additional_data is not None:
            coerced = _coerce_primitives(self.additional_data)
            object.__setattr__(self, "additional_data", coerced)

    def safe_dict(self, *, mask_keys: tuple[str, ...] | None = None) -> dict[str, Any]:
        """Export context as dict with sensitive fields masked.

        Args:
            mask_keys: Fields to exclude from output. Defaults to SAFE_DICT_MASK_KEYS.

        Returns:
            Dictionary with masked sensitive fields and guaranteed additional_data key.

        Example:
            >>> context = ErrorContextModel(user_id="12345", endpoint="/projects")
            >>> context.safe_dict()
            {'endpoint': '/projects', 'additional_data': {}}
        """
        if mask_keys is None:
            mask_keys = SAFE_DICT_MASK_KEYS

        data: dict[str, Any] = {}
        if self.operation is not None and "operation" not in mask_keys:
            data["operation"] = self.operation
        if self.endpoint is not None and "endpoint" not in mask_keys:
            data["endpoint"] = self.endpoint
        if self.user_id is not None and "user_id" not in mask_keys:
            data["user_id"] = self.user_id

        if self.additional_data is not None and "additional_data" not in mask_keys:
            data["additional_data"] = self.additional_data
        else:
            data["additional_data"] = {}

        return data


ErrorContext = ErrorContextModel


class SquashLinkError(Exception):
    """Base exception class for all SquashLink errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """Initialize SquashLinkError.

        Args:
            code: Error code from ErrorCode enum
            message: Human-readable error message
            context: Additional context information
            original_error: Original exception that caused this error
        """
        self.code = code
        self.message = message
        self.context = context or ErrorContext()
        self.original_error = original_error

        super().__init__(f"{code.value}: {message}")

    def __str__(self) -> str:
        """Return string representation of the error."""
        return f"{self.code.value}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging with sensitive fields masked."""
        return {
            "code": self.code.value,
            "message": self.message,
            "context": self.context.safe_dict(),
            "original_error": str(self.original_error) if self.original_error else None,
        }


class DomainError(SquashLinkError):
    """Domain-specific errors.

    Raised when tree or paging rules are violated, e.g. expanding a node
    the loader does not know about.
    """


class InfrastructureError(SquashLinkError):
    """Infrastructure-related errors.

    These errors occur when interacting with the SquashTM server or
    local resources such as configuration files.
    """


class SquashNetworkError(InfrastructureError):
    """Transport-level failures that survived the retry budget.

    Subclasses represent conditions that are transient by nature; the
    fallback data source only ever trips on these (and on an open circuit).
    """


class ApplicationError(SquashLinkError):
    """Application-level errors (configuration, command handling)."""


class SecurityError(SquashLinkError):
    """Security-related errors.

    Raised when the bearer token is missing, expired, undecodable, or
    rejected by the server.
    """


class CircuitOpenError(InfrastructureError):
    """The circuit breaker is withholding traffic; no request was sent."""

    def __init__(
        self,
        message: str = SquashErrorMessages.CIRCUIT_OPEN,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(ErrorCode.CIRCUIT_OPEN, message, context)


class TokenExpiredError(SecurityError):
    """The active token's expiry claim lies in the past (or is unreadable)."""

    def __init__(
        self,
        message: str = SquashErrorMessages.TOKEN_EXPIRED,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(ErrorCode.TOKEN_EXPIRED, message, context)


class TokenMalformedError(SecurityError):
    """The token is not a decodable JWT."""

    def __init__(
        self,
        message: str = SquashErrorMessages.TOKEN_MALFORMED,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(ErrorCode.TOKEN_MALFORMED, message, context, original_error)


class AuthRejectedError(SecurityError):
    """The server answered 401 or 403. Never retried."""

    def __init__(
        self,
        status_code: int,
        context: ErrorContext | None = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(
            ErrorCode.API_AUTHENTICATION_FAILED,
            SquashErrorMessages.AUTH_REJECTED.format(status_code=status_code),
            context,
        )


class RateLimitedError(SquashNetworkError):
    """The server kept answering 429 until the retry budget ran out."""

    def __init__(
        self,
        message: str = SquashErrorMessages.RATE_LIMITED,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(ErrorCode.API_RATE_LIMIT, message, context)


class ServerUnavailableError(SquashNetworkError):
    """502/503/504 on the last allowed attempt."""

    def __init__(
        self,
        status_code: int,
        context: ErrorContext | None = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(
            ErrorCode.API_SERVER_ERROR,
            SquashErrorMessages.SERVER_UNAVAILABLE.format(status_code=status_code),
            context,
        )


class NetworkError(SquashNetworkError):
    """Connection-level failure on the last allowed attempt."""

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(ErrorCode.NETWORK_ERROR, message, context, original_error)


class RequestTimeoutError(SquashNetworkError):
    """A single attempt exceeded its timeout on the last allowed attempt."""

    def __init__(
        self,
        timeout_ms: int,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
    ) -> None:
        self.timeout_ms = timeout_ms
        super().__init__(
            ErrorCode.API_TIMEOUT,
            SquashErrorMessages.TIMEOUT.format(timeout_ms=timeout_ms),
            context,
            original_error,
        )


class ApiResponseError(InfrastructureError):
    """Non-retryable, non-auth error status. Carries status code and body."""

    def __init__(
        self,
        status_code: int,
        body: str,
        context: ErrorContext | None = None,
    ) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(
            ErrorCode.API_REQUEST_FAILED,
            SquashErrorMessages.REQUEST_FAILED.format(status_code=status_code),
            context,
        )


class MalformedResponseError(InfrastructureError):
    """2xx response whose body does not have the expected shape."""

    def __init__(
        self,
        detail: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(
            ErrorCode.API_INVALID_RESPONSE,
            SquashErrorMessages.MALFORMED_RESPONSE.format(detail=detail),
            context,
            original_error,
        )


class CliError(ApplicationError):
    """CLI-specific error with enhanced context for command-line operations."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
        command: str | None = None,
        exit_code: int = 1,
    ):
        super().__init__(code, message, context, original_error)
        self.command = command
        self.exit_code = exit_code


def create_api_error(
    message: str,
    endpoint: str | None = None,
    status_code: int | None = None,
    original_error: Exception | None = None,
) -> InfrastructureError:
    """Create a generic API error with endpoint context."""
    additional_data: dict[str, PrimitiveContextValue] | None = (
        {"status_code": status_code} if status_code is not None else None
    )
    context = ErrorContext(
        operation="api_request",
        endpoint=endpoint,
        additional_data=additional_data,
    )
    return InfrastructureError(
        ErrorCode.API_REQUEST_FAILED,
        message,
        context,
        original_error,
    )


def create_config_error(
    message: str,
    config_key: str | None = None,
    original_error: Exception | None = None,
) -> ApplicationError:
    """Create a configuration error with context."""
    additional_data: dict[str, PrimitiveContextValue] | None = (
        {"config_key": config_key} if config_key else None
    )
    context = ErrorContext(
        operation="load_config",
        additional_data=additional_data,
    )
    return ApplicationError(
        ErrorCode.CONFIG_ERROR,
        message,
        context,
        original_error,
    )


def create_cli_error(
    message: str,
    command: str | None = None,
    operation: str | None = None,
    original_error: Exception | None = None,
    exit_code: int = 1,
) -> CliError:
    """Create a CLI error with context."""
    additional_data: dict[str, PrimitiveContextValue] | None = (
        {"command": command} if command else None
    )
    context = ErrorContext(
        operation=operation,
        additional_data=additional_data,
    )
    return CliError(
        ErrorCode.CLI_UNEXPECTED_ERROR,
        message,
        context,
        original_error,
        command,
        exit_code,
    )
