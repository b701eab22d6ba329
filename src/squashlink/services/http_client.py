"""Resilient HTTP client for the SquashTM REST API.

One logical GET is executed as a bounded sequence of attempts. Each attempt
has its own timeout. Rate limiting, gateway errors, timeouts and connection
failures are retried with exponential backoff; authentication failures and
other error statuses are terminal. Every terminal outcome is reported to the
circuit breaker, every success resets it.
"""

from __future__ import annotations

import asyncio
import json
import logging
import random
import time
from collections.abc import Awaitable, Mapping
from dataclasses import dataclass
from typing import Any, Callable

import aiohttp

from squashlink.services.circuit_breaker import CircuitBreaker, CircuitStatus
from squashlink.services.retry_policy import RetryPolicy
from squashlink.services.token_lifecycle import TokenContext
from squashlink.shared.constants import (
    ContentTypes,
    HTTPHeaders,
    HTTPStatusCodes,
    NetworkConfig,
    QueryParams,
    SquashAPIConfig,
    SquashEndpoints,
    SquashErrorMessages,
    SquashOperationNames,
)
from squashlink.shared.errors import (
    ApiResponseError,
    AuthRejectedError,
    CircuitOpenError,
    ErrorContext,
    MalformedResponseError,
    NetworkError,
    RateLimitedError,
    RequestTimeoutError,
    ServerUnavailableError,
    SquashLinkError,
    TokenExpiredError,
)
from squashlink.shared.logging import log_api_call, log_operation_error, log_operation_success

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[Any]]


@dataclass(frozen=True)
class _Exchange:
    """Outcome of one HTTP attempt that produced a response."""

    status: int
    retry_after_ms: float | None
    body: bytes

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


def _extract_retry_after(headers: Mapping[str, str]) -> float | None:
    """Return the Retry-After header in milliseconds, or None.

    Only the delta-seconds form is understood; HTTP dates fall back to the
    computed backoff.
    """
    raw = headers.get(HTTPHeaders.RETRY_AFTER)
    if not raw:
        return None
    try:
        seconds = float(raw)
    except ValueError:
        logger.debug("Failed to parse Retry-After header: %r", raw)
        return None
    if seconds < 0:
        return None
    return seconds * 1000


class ResilientHttpClient:
    """Async client issuing gated, retried GET requests against SquashTM.

    Args:
        base_url: API root, e.g. https://host/squash/api/rest/latest
        token_context: Holder of the active bearer token
        circuit_breaker: Breaker shared by every call of the process
        retry_policy: Attempt budget and backoff configuration
        timeout_ms: Default per-attempt timeout
        health_timeout_ms: Timeout used by health_check()
        session: Optional pre-built aiohttp session (not closed by close())
        sleep: Coroutine used for backoff delays, in seconds
        rng: Uniform [0, 1) source for jitter
    """

    def __init__(
        self,
        base_url: str,
        token_context: TokenContext,
        circuit_breaker: CircuitBreaker,
        retry_policy: RetryPolicy | None = None,
        *,
        timeout_ms: int = NetworkConfig.DEFAULT_TIMEOUT_MS,
        health_timeout_ms: int = NetworkConfig.HEALTH_CHECK_TIMEOUT_MS,
        session: aiohttp.ClientSession | None = None,
        sleep: SleepFunc = asyncio.sleep,
        rng: Callable[[], float] = random.random,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token_context = token_context
        self.circuit_breaker = circuit_breaker
        self.retry_policy = retry_policy or RetryPolicy()
        self.timeout_ms = timeout_ms
        self.health_timeout_ms = health_timeout_ms

        self._session = session
        self._owns_session = session is None
        self._session_lock = asyncio.Lock()
        self._sleep = sleep
        self._rng = rng

    async def __aenter__(self) -> ResilientHttpClient:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying session if this client created it."""
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
            logger.debug("SquashTM HTTP session closed")
        if self._owns_session:
            self._session = None

    async def _get_session(self) -> aiohttp.ClientSession:
        async with self._session_lock:
            if self._session is None or self._session.closed:
                self._session = aiohttp.ClientSession(
                    headers={
                        HTTPHeaders.ACCEPT: ContentTypes.JSON,
                        HTTPHeaders.CONTENT_TYPE: ContentTypes.JSON,
                    },
                )
                self._owns_session = True
                logger.debug("SquashTM HTTP session created")
            return self._session

    def circuit_status(self) -> CircuitStatus:
        return self.circuit_breaker.status()

    async def get(
        self,
        endpoint: str,
        *,
        page: int | None = None,
        size: int | None = None,
        fields: str | None = None,
        timeout_ms: int | None = None,
    ) -> dict[str, Any]:
        """Execute one logical GET and return the decoded JSON object.

        Args:
            endpoint: Path below the base URL, e.g. "/projects"
            page: Zero-based page index, sent only when given
            size: Page size, sent only when given
            fields: Projection field list, sent only when given
            timeout_ms: Per-attempt timeout overriding the client default

        Returns:
            The response body as a dictionary

        Raises:
            CircuitOpenError: The breaker is open; nothing was sent
            TokenExpiredError: The active token is expired; nothing was sent
            AuthRejectedError: 401/403
            RateLimitedError: 429 on the last attempt
            ServerUnavailableError: 502/503/504 on the last attempt
            RequestTimeoutError: Timeout on the last attempt
            NetworkError: Connection failure on the last attempt
            ApiResponseError: Any other error status
            MalformedResponseError: 2xx body that is not UTF-8 JSON object text
            ValueError: timeout_ms is not positive
        """
        context = ErrorContext(operation=SquashOperationNames.HTTP_GET, endpoint=endpoint)

        if self.circuit_breaker.is_open():
            error = CircuitOpenError(context=context)
            log_operation_error(logger, error)
            raise error

        if self.token_context.is_expired():
            error = TokenExpiredError(context=context)
            log_operation_error(logger, error)
            raise error

        # Attached once: a token replaced mid-call does not affect the retries
        token = self.token_context.current_token()
        url = f"{self.base_url}{endpoint}"
        params = self._build_params(page=page, size=size, fields=fields)
        headers = {
            HTTPHeaders.AUTHORIZATION: f"Bearer {token}",
            HTTPHeaders.ACCEPT: ContentTypes.JSON,
            HTTPHeaders.CONTENT_TYPE: ContentTypes.JSON,
        }
        if timeout_ms is None:
            timeout_ms = self.timeout_ms
        if timeout_ms <= 0:
            msg = f"timeout_ms must be positive, got {timeout_ms}"
            raise ValueError(msg)
        policy = self.retry_policy
        started = time.perf_counter()

        for attempt in range(policy.max_attempts):
            is_last = policy.is_last_attempt(attempt)
            attempt_info = {"attempt": attempt + 1, "max_attempts": policy.max_attempts}

            try:
                exchange = await self._exchange(url, params, headers, timeout_ms)
            except asyncio.TimeoutError as e:
                # Checked first: aiohttp.ServerTimeoutError is also a ClientError
                if is_last:
                    raise self._terminal_failure(
                        RequestTimeoutError(timeout_ms, context, original_error=e),
                    ) from e
                await self._retry_after_failure(endpoint, attempt, "timeout", attempt_info)
                continue
            except aiohttp.ClientError as e:
                if is_last:
                    raise self._terminal_failure(
                        NetworkError(
                            SquashErrorMessages.NETWORK_ERROR.format(error=e),
                            context,
                            original_error=e,
                        ),
                    ) from e
                await self._retry_after_failure(endpoint, attempt, type(e).__name__, attempt_info)
                continue

            status = exchange.status

            if status == HTTPStatusCodes.TOO_MANY_REQUESTS:
                if is_last:
                    raise self._terminal_failure(RateLimitedError(context=context))
                delay_ms = exchange.retry_after_ms
                if delay_ms is None:
                    delay_ms = policy.backoff_delay_ms(attempt, self._rng)
                logger.warning(
                    "SquashTM rate limit hit on %s; retrying in %.0f ms",
                    endpoint,
                    delay_ms,
                    extra={"context": {**attempt_info, "delay_ms": delay_ms}},
                )
                await self._sleep(delay_ms / 1000)
                continue

            if status in HTTPStatusCodes.AUTH_REJECTED:
                raise self._terminal_failure(AuthRejectedError(status, context))

            if status in HTTPStatusCodes.RETRYABLE_SERVER:
                if is_last:
                    raise self._terminal_failure(ServerUnavailableError(status, context))
                await self._retry_after_failure(endpoint, attempt, f"HTTP {status}", attempt_info)
                continue

            if not HTTPStatusCodes.is_success(status):
                raise self._terminal_failure(ApiResponseError(status, exchange.text, context))

            payload = self._decode(exchange.body, context)
            self.circuit_breaker.record_success()
            log_operation_success(
                logger,
                SquashOperationNames.HTTP_GET,
                (time.perf_counter() - started) * 1000,
                result_info={"attempts": attempt + 1},
                context=context,
            )
            return payload

        # Unreachable: the last attempt always returns or raises
        msg = f"Retry loop for {endpoint} ended without an outcome"
        raise RuntimeError(msg)

    async def health_check(self) -> bool:
        """Request a one-element page of projects; never raises."""
        try:
            await self.get(
                SquashEndpoints.PROJECTS,
                page=0,
                size=SquashAPIConfig.HEALTH_CHECK_PAGE_SIZE,
                timeout_ms=self.health_timeout_ms,
            )
        except SquashLinkError as e:
            logger.info(
                "SquashTM health check failed: %s",
                e.code.value,
                extra={"operation": SquashOperationNames.HEALTH_CHECK},
            )
            return False
        except Exception:
            logger.exception(
                "SquashTM health check raised an unexpected error",
                extra={"operation": SquashOperationNames.HEALTH_CHECK},
            )
            return False
        return True

    @staticmethod
    def _build_params(
        *,
        page: int | None,
        size: int | None,
        fields: str | None,
    ) -> dict[str, str]:
        params: dict[str, str] = {}
        if page is not None:
            params[QueryParams.PAGE] = str(page)
        if size is not None:
            params[QueryParams.SIZE] = str(size)
        if fields:
            params[QueryParams.FIELDS] = fields
        return params

    async def _exchange(
        self,
        url: str,
        params: dict[str, str],
        headers: dict[str, str],
        timeout_ms: int,
    ) -> _Exchange:
        session = await self._get_session()
        timeout = aiohttp.ClientTimeout(total=timeout_ms / 1000)
        started = time.perf_counter()

        async with session.get(url, params=params, headers=headers, timeout=timeout) as response:
            body = await response.read()
            exchange = _Exchange(
                status=response.status,
                retry_after_ms=_extract_retry_after(response.headers),
                body=body,
            )

        log_api_call(
            logger,
            url[len(self.base_url) :],
            status_code=exchange.status,
            duration_ms=(time.perf_counter() - started) * 1000,
            context={"params": params},
        )
        return exchange

    async def _retry_after_failure(
        self,
        endpoint: str,
        attempt: int,
        reason: str,
        attempt_info: dict[str, int],
    ) -> None:
        delay_ms = self.retry_policy.backoff_delay_ms(attempt, self._rng)
        logger.warning(
            "SquashTM request to %s failed (%s); retrying in %.0f ms",
            endpoint,
            reason,
            delay_ms,
            extra={"context": {**attempt_info, "delay_ms": delay_ms}},
        )
        await self._sleep(delay_ms / 1000)

    def _terminal_failure(self, error: SquashLinkError) -> SquashLinkError:
        self.circuit_breaker.record_failure()
        log_operation_error(logger, error)
        return error

    def _decode(self, body: bytes, context: ErrorContext) -> dict[str, Any]:
        try:
            payload = json.loads(body.decode("utf-8")) if body else None
        except UnicodeDecodeError as e:
            raise self._terminal_failure(
                MalformedResponseError("body is not valid UTF-8", context, original_error=e),
            ) from e
        except ValueError as e:
            raise self._terminal_failure(
                MalformedResponseError("body is not valid JSON", context, original_error=e),
            ) from e

        if not isinstance(payload, dict):
            raise self._terminal_failure(
                MalformedResponseError(f"expected a JSON object, got {type(payload).__name__}", context),
            )
        return payload


__all__ = ["ResilientHttpClient"]
