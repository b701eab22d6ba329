"""
Pytest configuration and shared fixtures for SquashLink tests.

Provides a scripted stand-in for aiohttp.ClientSession, JWT factories and
environment isolation so no test touches a real SquashTM server.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import time
from collections.abc import Generator
from typing import Any

import aiohttp
import jwt
import pytest

from squashlink.cli.common.context import clear_cli_context
from squashlink.config import reset_config
from squashlink.services import CircuitBreaker, ResilientHttpClient, RetryPolicy, TokenContext

TEST_SECRET = "test-secret"  # noqa: S105  # pragma: allowlist secret
BASE_URL = "https://squash.example.test/squash/api/rest/latest"


def make_token(exp_offset_s: int | None = 3600, **claims: Any) -> str:
    """Build an HS256 JWT whose exp lies exp_offset_s seconds from now."""
    payload: dict[str, Any] = {
        "sub": "tester",
        "iat": int(time.time()),
        "permissions": ["READ"],
        **claims,
    }
    if exp_offset_s is not None:
        payload["exp"] = int(time.time()) + exp_offset_s
    return jwt.encode(payload, TEST_SECRET, algorithm="HS256")


class FakeResponse:
    """Minimal aiohttp response used as an async context manager."""

    def __init__(
        self,
        status: int = 200,
        body: Any = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.status = status
        self.headers = headers or {}
        if body is None:
            self._body = b""
        elif isinstance(body, bytes):
            self._body = body
        elif isinstance(body, str):
            self._body = body.encode("utf-8")
        else:
            self._body = json.dumps(body).encode("utf-8")

    async def read(self) -> bytes:
        return self._body

    async def __aenter__(self) -> FakeResponse:
        return self

    async def __aexit__(self, *args: Any) -> None:
        return None


class FakeSession:
    """Replays scripted outcomes for successive GET calls.

    Each scripted item is either a FakeResponse or an exception instance
    raised when the request is made.
    """

    def __init__(self, *outcomes: FakeResponse | BaseException) -> None:
        self.outcomes = list(outcomes)
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    def queue(self, *outcomes: FakeResponse | BaseException) -> None:
        self.outcomes.extend(outcomes)

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"url": url, **kwargs})
        if not self.outcomes:
            msg = f"Unexpected request to {url}"
            raise AssertionError(msg)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def close(self) -> None:
        self.closed = True


class RecordingSleep:
    """Async sleep replacement remembering the requested delays in seconds."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def hal(key: str, items: list[dict[str, Any]], **page: int) -> dict[str, Any]:
    """Build a HAL collection body."""
    body: dict[str, Any] = {"_embedded": {key: items}}
    if page:
        body["page"] = {
            "size": page.get("size", len(items)),
            "totalElements": page.get("total", len(items)),
            "totalPages": page.get("pages", 1),
            "number": page.get("number", 0),
        }
    return body


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Keep host configuration out of the tests and restore global state."""
    for name in ("SQUASH_API_TOKEN", "SQUASH_API_URL"):
        monkeypatch.delenv(name, raising=False)
    for name in list(os.environ):
        if name.startswith("SQUASHLINK_"):
            monkeypatch.delenv(name, raising=False)

    reset_config()
    clear_cli_context()
    yield
    reset_config()
    clear_cli_context()

    # The CLI configures the package logger; give caplog its records back
    package_logger = logging.getLogger("squashlink")
    package_logger.handlers.clear()
    package_logger.setLevel(logging.NOTSET)
    package_logger.propagate = True


@pytest.fixture
def valid_token() -> str:
    return make_token()


@pytest.fixture
def expired_token() -> str:
    return make_token(exp_offset_s=-60)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def client_factory(valid_token: str, recording_sleep: RecordingSleep):
    """Build a ResilientHttpClient over a FakeSession with deterministic timing."""

    def _build(
        session: FakeSession,
        *,
        token: str | None = None,
        max_attempts: int = 3,
        jitter: bool = False,
        breaker: CircuitBreaker | None = None,
    ) -> ResilientHttpClient:
        return ResilientHttpClient(
            BASE_URL,
            TokenContext(token if token is not None else valid_token),
            breaker or CircuitBreaker(failure_threshold=5, cooldown_ms=60_000),
            RetryPolicy(max_attempts=max_attempts, base_delay_ms=1000, max_delay_ms=8000, jitter=jitter),
            timeout_ms=10_000,
            health_timeout_ms=5_000,
            session=session,  # type: ignore[arg-type]
            sleep=recording_sleep,
            rng=lambda: 0.5,
        )

    return _build


def connection_error() -> aiohttp.ClientConnectionError:
    return aiohttp.ClientConnectionError("connection refused")


def timeout_error() -> asyncio.TimeoutError:
    return asyncio.TimeoutError()
